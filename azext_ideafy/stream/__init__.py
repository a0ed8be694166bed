"""Stream decoding: bytes to lines to envelopes."""

from azext_ideafy.stream.decoder import ChunkDecoder
from azext_ideafy.stream.router import (
    RESERVED_STEPS,
    AccumulatedContent,
    Envelope,
    EnvelopeRouter,
    parse_envelope,
)

__all__ = [
    "ChunkDecoder",
    "Envelope",
    "EnvelopeRouter",
    "AccumulatedContent",
    "RESERVED_STEPS",
    "parse_envelope",
]
