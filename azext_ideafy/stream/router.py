"""Envelope parsing and per-step accumulation.

Each decoded line is expected to be a JSON object ``{"step": ..., "content": ...}``.
The upstream interleaves diagnostic text with the envelopes, so anything
that does not parse is dropped without raising.  ``init`` and ``http``
envelopes report transport progress and never reach the visible log.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

RESERVED_STEPS = frozenset({"init", "http"})

AccumulatedContent = dict[str, list[Any]]


@dataclass(frozen=True)
class Envelope:
    """One decoded unit of the stream."""

    step: str
    content: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"step": self.step, "content": self.content}


def parse_envelope(line: str) -> Envelope | None:
    """Parse *line* into an ``Envelope``, or return ``None``.

    ``None`` covers blank lines, non-JSON text, JSON values that are not
    objects, and objects without a non-empty string ``step``.
    """
    if not line or not line.strip():
        return None

    try:
        parsed = json.loads(line)
    except (ValueError, RecursionError):
        logger.debug("Ignoring non-JSON stream line: %.80s", line)
        return None

    if not isinstance(parsed, dict):
        logger.debug("Ignoring JSON line that is not an object: %.80s", line)
        return None

    step = parsed.get("step")
    if not isinstance(step, str) or not step:
        logger.debug("Ignoring envelope without a step: %.80s", line)
        return None

    return Envelope(step=step, content=parsed.get("content"))


class EnvelopeRouter:
    """Route parsed envelopes into the visible log and the per-step map.

    The router owns both collections for the lifetime of one stream
    session.  Output depends only on the order of the lines fed in.
    """

    def __init__(self):
        self.log: list[Envelope] = []
        self.accumulated: AccumulatedContent = {}
        self.transport_events: list[Envelope] = []

    def route(self, line: str) -> Envelope | None:
        """Route one complete line.

        Returns the envelope when it was added to the visible log, and
        ``None`` for dropped lines and transport markers.
        """
        envelope = parse_envelope(line)
        if envelope is None:
            return None

        if envelope.step in RESERVED_STEPS:
            logger.debug("Transport marker [%s]: %s", envelope.step, envelope.content)
            self.transport_events.append(envelope)
            return None

        self.log.append(envelope)
        self.accumulated.setdefault(envelope.step, []).append(envelope.content)
        return envelope

    def route_lines(self, lines: Iterable[str]) -> list[Envelope]:
        """Route several lines in order; return the accepted envelopes."""
        accepted = []
        for line in lines:
            envelope = self.route(line)
            if envelope is not None:
                accepted.append(envelope)
        return accepted

    def reset(self):
        """Start over for a new session."""
        self.log = []
        self.accumulated = {}
        self.transport_events = []
