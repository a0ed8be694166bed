"""Field extraction from semi-structured text.

The upstream sometimes emits a record as its textual dump instead of a
JSON object, e.g.::

    market_score=7.5 competition_score=3.0 risks=['saturation', 'timing'] summary='Promising idea'

These helpers pull typed values out of such text without a formal
parser.  Keys only match at a word boundary, so ``risks`` never matches
inside ``legal_risks`` and ``summary`` never matches inside
``overall_summary``.
"""

from __future__ import annotations

import math
import re
from functools import lru_cache
from typing import Any

_QUOTE_CHARS = "'\""
_ITEM_STRIP = " \t\r\n" + _QUOTE_CHARS
_ESCAPES = {"n": "\n", "t": "\t"}

_NUMBER = r"([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)"
_QUOTED = r"""(?:'((?:[^'\\]|\\.)*)'|"((?:[^"\\]|\\.)*)")"""

_SENTENCE_RE = re.compile(r"[^.!?]+(?:[.!?]+|$)")


def flatten_text(value: Any) -> str:
    """Deep-flatten *value* into a single string.

    Strings pass through, sequences and mapping values are flattened and
    joined with one space, ``None`` becomes an empty string.  Nesting
    depth is unbounded.
    """
    if isinstance(value, str):
        return value
    parts: list[str] = []
    stack = [value]
    while stack:
        item = stack.pop()
        if item is None:
            continue
        if isinstance(item, str):
            if item:
                parts.append(item)
        elif isinstance(item, dict):
            stack.extend(reversed(list(item.values())))
        elif isinstance(item, (list, tuple)):
            stack.extend(reversed(item))
        else:
            parts.append(str(item))
    return " ".join(parts)


@lru_cache(maxsize=None)
def _key_re(key: str, value_pattern: str) -> re.Pattern:
    return re.compile(r"(?<!\w)" + re.escape(key) + r"\s*=\s*" + value_pattern, re.DOTALL)


def _unescape(text: str) -> str:
    if "\\" not in text:
        return text
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            out.append(_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def _skip_space(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def _scan_list(text: str, start: int) -> list[str] | None:
    """Scan list items from *start* (just past ``[``) to the closing ``]``.

    A quote opens an item only at the start of that item, and closes it
    only when followed by ``,`` or ``]``, so apostrophes inside an item
    do not derail the scan.  Returns ``None`` when the list never closes.
    """
    n = len(text)
    items: list[str] = []
    i = _skip_space(text, start)
    while i < n:
        if text[i] == "]":
            return items

        if text[i] in _QUOTE_CHARS:
            quote = text[i]
            j = i + 1
            buf: list[str] = []
            while j < n:
                ch = text[j]
                if ch == "\\" and j + 1 < n:
                    buf.append("\\" + text[j + 1])
                    j += 2
                    continue
                if ch == quote:
                    k = _skip_space(text, j + 1)
                    if k >= n or text[k] in ",]":
                        break
                buf.append(ch)
                j += 1
            if j >= n:
                return None
            items.append(_unescape("".join(buf)))
            i = j + 1
        else:
            j = i
            while j < n and text[j] not in ",]":
                j += 1
            if j >= n:
                return None
            items.append(text[i:j])
            i = j

        i = _skip_space(text, i)
        if i >= n:
            return None
        if text[i] == "]":
            return items
        # separator comma
        i = _skip_space(text, i + 1)
    return None


def extract_list(text: str, key: str) -> list[str]:
    """Return the items of the first ``key=[...]`` in *text*.

    Items are split on commas, trimmed of surrounding whitespace and
    quote characters, and empty items are dropped.  A missing key gives
    an empty list.
    """
    match = _key_re(key, r"\[").search(text)
    if not match:
        return []

    start = match.end()
    items = _scan_list(text, start)
    if items is None:
        # Unbalanced quotes: fall back to the nearest closing bracket.
        end = text.find("]", start)
        if end < 0:
            return []
        items = text[start:end].split(",")

    cleaned = (item.strip(_ITEM_STRIP) for item in items)
    return [item for item in cleaned if item]


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def extract_number(text: str, key: str) -> float | None:
    """Return the float value of ``key=<number>``, or ``None``."""
    match = _key_re(key, _NUMBER).search(text)
    if not match:
        return None
    try:
        number = float(match.group(1))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def extract_text(text: str, key: str, occurrence: int = 0) -> str:
    """Return the quoted value of the *occurrence*-th ``key='...'``.

    Single quotes are the upstream convention; double quotes (used by
    Python reprs for text containing an apostrophe) are accepted too.
    Returns an empty string when there are not enough occurrences.
    """
    for index, match in enumerate(_key_re(key, _QUOTED).finditer(text)):
        if index == occurrence:
            value = match.group(1) if match.group(1) is not None else match.group(2)
            return _unescape(value)
    return ""


def count_occurrences(text: str, key: str) -> int:
    """Number of quoted ``key='...'`` values in *text*."""
    return sum(1 for _ in _key_re(key, _QUOTED).finditer(text))


def split_sentences(text: str) -> list[str]:
    """Split *text* into trimmed sentences for display."""
    sentences = [s.strip() for s in _SENTENCE_RE.findall(text or "")]
    sentences = [s for s in sentences if s]
    if sentences:
        return sentences
    return [text.strip()] if text and text.strip() else []
