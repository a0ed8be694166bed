"""Incremental byte-to-line decoding for the analysis stream.

The upstream job writes one JSON envelope per ``\\n``-terminated line, but
the transport hands us arbitrary byte chunks: a chunk may end in the middle
of a line, or in the middle of a multi-byte UTF-8 character.  The decoder
keeps two pieces of state across calls:

* an incremental codec decoder, so a character split over two chunks is
  reassembled instead of being replaced, and
* the trailing text fragment after the last newline, which is prefixed
  onto the next chunk's text.
"""

from __future__ import annotations

import codecs
import logging

logger = logging.getLogger(__name__)

LINE_DELIMITER = "\n"


class ChunkDecoder:
    """Turn raw byte chunks into complete text lines.

    Usage::

        decoder = ChunkDecoder()
        for chunk in chunks:
            for line in decoder.feed(chunk):
                handle(line)
        leftover = decoder.finish()
    """

    def __init__(self, encoding: str = "utf-8"):
        self._encoding = encoding
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""
        self._finished = False

    @property
    def pending(self) -> str:
        """Text held back because no line delimiter has arrived yet."""
        return self._pending

    def feed(self, chunk: bytes, final: bool = False) -> list[str]:
        """Decode *chunk* and return every line it completes.

        The returned lines do not include the ``\\n`` delimiter.  Any
        text after the last delimiter is kept for the next call.  When
        *final* is true the codec is flushed as well, but the held
        fragment is still not returned as a line (see ``finish``).
        """
        if self._finished:
            raise ValueError("ChunkDecoder.feed() called after finish().")

        text = self._decoder.decode(chunk or b"", final=final)
        if not text:
            return []

        buffer = self._pending + text
        parts = buffer.split(LINE_DELIMITER)
        self._pending = parts.pop()
        return parts

    def finish(self) -> str | None:
        """Mark the end of the stream.

        Flushes the codec and returns the held fragment if it carries any
        non-whitespace text, otherwise ``None``.  The upstream always
        terminates lines, so callers normally ignore the fragment; when
        they do route it, it must go through the same tolerant parsing as
        any other line.
        """
        if not self._finished:
            tail = self._decoder.decode(b"", final=True)
            self._pending += tail
            self._finished = True

        fragment, self._pending = self._pending, ""
        if fragment.strip():
            logger.debug("Stream ended with an unterminated fragment (%d chars)", len(fragment))
            return fragment
        return None

    def reset(self):
        """Discard all state so the decoder can serve a new stream."""
        self._decoder = codecs.getincrementaldecoder(self._encoding)(errors="replace")
        self._pending = ""
        self._finished = False
