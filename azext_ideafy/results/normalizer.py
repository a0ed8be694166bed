"""Normalize upstream analysis output into a ``CanonicalResult``.

The upstream job reports each analysis domain in one of three shapes:

1. a structured object with the expected fields,
2. a textual dump of the record (``risks=['a', 'b'] summary='...'``),
3. unstructured free text.

For every domain an ordered tuple of strategies is tried and the first
one that returns a record wins.  When no strategy produces a record for
any domain, the result has no structured data and the consumer falls
back to the raw envelope log.

Input may be an aggregate object (``{"idea_validation": {...}, ...}``),
the per-step map built by ``EnvelopeRouter`` (every value a list, in
arrival order), or plain text.

Positional summary convention
-----------------------------
When several domains arrive concatenated in one text (content under a
step that is not a domain key), the record dumps all use the bare key
``summary='...'``.  The N-th occurrence belongs to the N-th domain in
processing order: idea validation first, legal analysis second, SWOT
third.  Nothing in the text ties a summary to its domain, so this order
must not change.  A per-domain key (``idea_summary=``) in the upstream
format would remove the ambiguity.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from azext_ideafy.results.extraction import (
    count_occurrences,
    extract_list,
    extract_number,
    extract_text,
    flatten_text,
)
from azext_ideafy.results.models import (
    CanonicalResult,
    DomainRecord,
    IdeaValidation,
    LegalAnalysis,
    SwotAnalysis,
)

logger = logging.getLogger(__name__)

OVERALL_SUMMARY_KEY = "overall_summary"


@dataclass(frozen=True)
class Domain:
    """An analysis domain: its key in the upstream output and its record type."""

    key: str
    record_type: type[DomainRecord]
    position: int


DOMAINS: tuple[Domain, ...] = (
    Domain("idea_validation", IdeaValidation, 0),
    Domain("legal_analysis", LegalAnalysis, 1),
    Domain("swot_analysis", SwotAnalysis, 2),
)

DOMAIN_KEYS = frozenset(d.key for d in DOMAINS)


@dataclass
class DomainInput:
    """Everything the strategies may look at for one domain.

    ``values`` holds the content found under the domain key (one entry for
    an aggregate object, one per envelope for the accumulated map).
    ``summary_index`` selects which ``summary='...'`` occurrence belongs
    to the domain in ``text``.
    """

    domain: Domain
    values: list[Any]
    text: str
    summary_index: int = 0


Strategy = Callable[[DomainInput], "DomainRecord | None"]


# ---------------------------------------------------------------------------
# Coercion helpers (structured tier)
# ---------------------------------------------------------------------------


def _coerce_score(value: Any) -> float | None:
    """Return *value* as a finite float, or ``None`` (NaN and infinities included)."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        score = float(value)
    except (ValueError, OverflowError):
        return None
    return score if math.isfinite(score) else None


def _coerce_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        items = (flatten_text(item) for item in value)
        return [item for item in items if item]
    return [flatten_text(value)]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _structured_candidate(domain: Domain, values: list[Any]) -> dict | None:
    """Merge the mapping values that carry at least one expected field."""
    expected = set(domain.record_type.field_names())
    merged: dict = {}
    for value in values:
        if isinstance(value, Mapping) and expected.intersection(value.keys()):
            merged.update(value)
    return merged or None


def structured_strategy(data: DomainInput) -> DomainRecord | None:
    """Copy fields from an object that already has the expected shape."""
    candidate = _structured_candidate(data.domain, data.values)
    if candidate is None:
        return None

    record_type = data.domain.record_type
    kwargs: dict[str, Any] = {}
    for name in record_type.SCORE_FIELDS:
        kwargs[name] = _coerce_score(candidate.get(name))
    for name in record_type.LIST_FIELDS:
        kwargs[name] = _coerce_list(candidate.get(name))
    for name in record_type.TEXT_FIELDS:
        kwargs[name] = flatten_text(candidate.get(name))
    return record_type(**kwargs)


def semi_structured_strategy(data: DomainInput) -> DomainRecord | None:
    """Extract fields from ``key=[...]`` / ``key=<n>`` / ``key='...'`` text."""
    text = data.text
    if not text:
        return None

    record_type = data.domain.record_type
    kwargs: dict[str, Any] = {}
    for name in record_type.SCORE_FIELDS:
        kwargs[name] = extract_number(text, name)
    for name in record_type.LIST_FIELDS:
        kwargs[name] = extract_list(text, name)
    for name in record_type.TEXT_FIELDS:
        kwargs[name] = extract_text(text, name, data.summary_index if name == "summary" else 0)

    record = record_type(**kwargs)
    if record.is_empty():
        return None
    return record


STRATEGIES: tuple[Strategy, ...] = (structured_strategy, semi_structured_strategy)


# ---------------------------------------------------------------------------
# Normalizer
# ---------------------------------------------------------------------------


def _fragment_text(values: list[Any], domain: Domain) -> str:
    """Join a domain's textual fragments with one space.

    Mapping values that lack every expected field are flattened too, so a
    record dump nested in an unexpected wrapper is still searched.
    """
    expected = set(domain.record_type.field_names())
    fragments = []
    for value in values:
        if isinstance(value, Mapping) and expected.intersection(value.keys()):
            continue
        text = flatten_text(value)
        if text:
            fragments.append(text)
    return " ".join(fragments)


def _as_values(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    return [value]


class ResultNormalizer:
    """Build a ``CanonicalResult`` from whatever shape the upstream produced."""

    def __init__(self, strategies: tuple[Strategy, ...] = STRATEGIES):
        self._strategies = strategies

    def normalize(self, source: Any) -> CanonicalResult:
        if isinstance(source, Mapping):
            by_key = {str(k): _as_values(v) for k, v in source.items()}
        else:
            by_key = {}
            source = _as_values(source)

        shared_values: list[Any] = []
        if by_key:
            for key, values in by_key.items():
                if key not in DOMAIN_KEYS and key != OVERALL_SUMMARY_KEY:
                    shared_values.extend(values)
        else:
            shared_values = list(source)
        shared_text = " ".join(t for t in (flatten_text(v) for v in shared_values) if t)
        if count_occurrences(shared_text, "summary") > 1:
            logger.debug(
                "Shared text carries several summary= values; assigning them by position "
                "(idea_validation, legal_analysis, swot_analysis)"
            )

        records: dict[str, DomainRecord | None] = {}
        for domain in DOMAINS:
            if domain.key in by_key:
                values = by_key[domain.key]
                data = DomainInput(domain, values, _fragment_text(values, domain))
            else:
                data = DomainInput(domain, [], shared_text, summary_index=domain.position)
            records[domain.key] = self._run_cascade(data)

        result = CanonicalResult(
            idea_validation=records["idea_validation"],
            legal_analysis=records["legal_analysis"],
            swot_analysis=records["swot_analysis"],
            overall_summary=self._overall_summary(by_key, shared_text),
        )

        if not result.has_structured_data:
            logger.debug("No structured data found in any domain; raw fallback applies")
        return result

    def _run_cascade(self, data: DomainInput) -> DomainRecord | None:
        for strategy in self._strategies:
            record = strategy(data)
            if record is not None:
                logger.debug("%s matched by %s", data.domain.key, strategy.__name__)
                return record
        logger.debug("No data extracted for %s", data.domain.key)
        return None

    @staticmethod
    def _overall_summary(by_key: dict[str, list[Any]], shared_text: str) -> str:
        if OVERALL_SUMMARY_KEY in by_key:
            text = flatten_text(by_key[OVERALL_SUMMARY_KEY])
            embedded = extract_text(text, OVERALL_SUMMARY_KEY)
            return embedded or text
        return extract_text(shared_text, OVERALL_SUMMARY_KEY)


_default_normalizer = ResultNormalizer()


def normalize_results(source: Any) -> CanonicalResult:
    """Normalize *source* with the default strategy cascade."""
    return _default_normalizer.normalize(source)
