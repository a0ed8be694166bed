"""HTTP client for the idea-analysis endpoint.

The endpoint takes the idea description and the research actions as
query parameters (``prompt`` once, ``actions`` repeated), an optional
PDF as a multipart ``file`` part, and answers with a chunked stream of
``\\n``-delimited JSON envelopes.

No retries: a failed request ends the session and is reported to the
user as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import requests

from azext_ideafy.errors import TransportError, UpstreamStatusError
from azext_ideafy.parsers.attachment import Attachment

logger = logging.getLogger(__name__)

AUTO = "auto"


@dataclass
class AnalysisRequest:
    """One analysis request: description, research actions, optional PDF."""

    prompt: str
    actions: list[str] = field(default_factory=lambda: [AUTO, AUTO])
    attachment: Attachment | None = None

    def to_params(self) -> list[tuple[str, str]]:
        """Query parameters in order, with ``actions`` repeated."""
        params = [("prompt", self.prompt)]
        params.extend(("actions", action) for action in self.actions)
        return params


def resolve_action(mode: str | None, text: str | None = None) -> str:
    """Map a research mode and its free text to an ``actions`` value.

    ``auto`` (or no mode) stays ``auto``; a custom mode uses the trimmed
    text and falls back to ``auto`` when the text is empty.
    """
    if not mode or mode.strip().lower() == AUTO:
        return AUTO
    value = (text if text is not None else mode).strip()
    return value or AUTO


class AnalyzeClient:
    """Opens the analysis stream with a single ``requests.post``."""

    def __init__(self, url: str, timeout: int = 300, chunk_size: int = 0):
        self._url = url
        self._timeout = timeout or None
        self._chunk_size = chunk_size or None

    @classmethod
    def from_config(cls, config) -> "AnalyzeClient":
        """Build a client from an ``IdeafyConfig``."""
        return cls(
            url=config.get("api.url"),
            timeout=config.get("api.timeout", 300),
            chunk_size=config.get("api.chunk_size", 0),
        )

    @property
    def url(self) -> str:
        return self._url

    def _post(self, request: AnalysisRequest) -> requests.Response:
        # The endpoint only parses a form when a file is attached; otherwise the body stays empty.
        files = request.attachment.to_multipart() if request.attachment else None
        logger.debug(
            "POST %s: prompt=%d chars, actions=%s, attachment=%s",
            self._url,
            len(request.prompt),
            request.actions,
            request.attachment.filename if request.attachment else None,
        )
        try:
            return requests.post(
                self._url,
                params=request.to_params(),
                files=files,
                timeout=self._timeout,
                stream=True,
            )
        except requests.Timeout as exc:
            raise TransportError(f"timed out after {self._timeout}s: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(str(exc)) from exc

    @contextmanager
    def open_stream(self, request: AnalysisRequest) -> Iterator[Iterator[bytes]]:
        """Open the stream and yield an iterator over its byte chunks.

        Usage::

            with client.open_stream(request) as chunks:
                for chunk in chunks:
                    ...

        Raises:
            TransportError if the request cannot be sent or the stream
            breaks while reading.
            UpstreamStatusError on a non-2xx response.
        """
        resp = self._post(request)
        try:
            if not resp.ok:
                body = ""
                try:
                    body = resp.text
                except requests.RequestException:
                    logger.debug("Could not read error body for HTTP %s", resp.status_code)
                raise UpstreamStatusError(resp.status_code, body, resp.reason or "")

            yield self._iter_chunks(resp)
        finally:
            resp.close()

    def _iter_chunks(self, resp: requests.Response) -> Iterator[bytes]:
        try:
            for chunk in resp.iter_content(chunk_size=self._chunk_size):
                if chunk:
                    yield chunk
        except requests.RequestException as exc:
            raise TransportError(f"stream interrupted: {exc}") from exc
