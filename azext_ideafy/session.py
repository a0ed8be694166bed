"""One analysis request from first byte to normalized result.

The session is the explicit context for a single request: it owns the
decoder, the router and the outcome, and nothing in it is shared with
other sessions.  Reading is strictly sequential, one chunk in flight at
a time; the next chunk is only requested after the current one has been
decoded and routed, so the consumer's pace throttles the producer.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from azext_ideafy.errors import IdeafyError
from azext_ideafy.results.models import CanonicalResult
from azext_ideafy.results.normalizer import ResultNormalizer
from azext_ideafy.stream.decoder import ChunkDecoder
from azext_ideafy.stream.router import Envelope, EnvelopeRouter

logger = logging.getLogger(__name__)


@dataclass
class SessionOutcome:
    """What the presentation layer receives when a session ends.

    ``result`` is ``None`` only for a cancelled session.  When the result
    holds no domain record, ``show_raw`` is true and the consumer renders
    ``raw_log`` instead.
    """

    result: CanonicalResult | None = None
    raw_log: list[Envelope] = field(default_factory=list)
    cancelled: bool = False

    @property
    def show_raw(self) -> bool:
        return not self.cancelled and (self.result is None or not self.result.has_structured_data)

    def to_dict(self) -> dict[str, Any]:
        if self.cancelled:
            return {"status": "cancelled"}
        data: dict[str, Any] = {
            "status": "raw" if self.show_raw else "structured",
            "result": self.result.to_dict() if self.result else None,
        }
        if self.show_raw:
            data["stream"] = [envelope.to_dict() for envelope in self.raw_log]
        return data


class AnalysisSession:
    """Consume the analysis stream and normalize what it carried.

    Usage::

        session = AnalysisSession(client, request, on_envelope=console.print_envelope)
        outcome = session.run()

    ``cancel()`` may be called from another thread (or a signal handler);
    the loop stops before its next read and nothing partial is returned.
    """

    def __init__(
        self,
        client,
        request,
        on_envelope: Callable[[Envelope], None] | None = None,
        flush_trailing_fragment: bool = False,
        normalizer: ResultNormalizer | None = None,
    ):
        self._client = client
        self._request = request
        self._on_envelope = on_envelope
        self._flush_trailing = flush_trailing_fragment
        self._normalizer = normalizer or ResultNormalizer()
        self._cancelled = threading.Event()
        self.decoder = ChunkDecoder()
        self.router = EnvelopeRouter()
        self.error: IdeafyError | None = None
        self.outcome: SessionOutcome | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self):
        """Ask the read loop to stop before its next read."""
        self._cancelled.set()

    def run(self) -> SessionOutcome:
        """Read the whole stream and return the outcome.

        Raises:
            TransportError / UpstreamStatusError, after recording them on
            ``self.error``.
        """
        try:
            with self._client.open_stream(self._request) as chunks:
                completed = self._consume(chunks)
        except IdeafyError as exc:
            self.error = exc
            logger.debug("Analysis session failed: %s", exc)
            raise

        if not completed:
            logger.debug("Analysis session cancelled after %d envelopes", len(self.router.log))
            self.router.reset()
            self.outcome = SessionOutcome(cancelled=True)
            return self.outcome

        self.outcome = SessionOutcome(
            result=self._normalizer.normalize(self.router.accumulated),
            raw_log=list(self.router.log),
        )
        return self.outcome

    def _consume(self, chunks) -> bool:
        """Route every chunk; return False if cancelled mid-stream."""
        iterator = iter(chunks)
        while True:
            if self._cancelled.is_set():
                return False
            try:
                chunk = next(iterator)
            except StopIteration:
                break
            for line in self.decoder.feed(chunk):
                self._route(line)

        fragment = self.decoder.finish()
        if fragment is not None:
            if self._flush_trailing:
                self._route(fragment)
            else:
                logger.debug("Dropping unterminated trailing fragment: %.80s", fragment)
        return True

    def _route(self, line: str):
        envelope = self.router.route(line)
        if envelope is not None and self._on_envelope is not None:
            self._on_envelope(envelope)
