"""Canonical result types produced by the normalizer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar


@dataclass
class DomainRecord:
    """Shared behaviour for the per-domain records.

    Subclasses list their fields by kind so the extraction strategies can
    fill any record without knowing its concrete type.
    """

    SCORE_FIELDS: ClassVar[tuple[str, ...]] = ()
    LIST_FIELDS: ClassVar[tuple[str, ...]] = ()
    TEXT_FIELDS: ClassVar[tuple[str, ...]] = ("summary",)

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return cls.SCORE_FIELDS + cls.LIST_FIELDS + cls.TEXT_FIELDS

    def is_empty(self) -> bool:
        """True when no field carries a value."""
        for name in self.SCORE_FIELDS:
            if getattr(self, name) is not None:
                return False
        for name in self.LIST_FIELDS + self.TEXT_FIELDS:
            if getattr(self, name):
                return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class IdeaValidation(DomainRecord):
    """Market and competition scores (0-10 by convention) plus key risks."""

    SCORE_FIELDS: ClassVar[tuple[str, ...]] = ("market_score", "competition_score")
    LIST_FIELDS: ClassVar[tuple[str, ...]] = ("risks",)

    market_score: float | None = None
    competition_score: float | None = None
    risks: list[str] = field(default_factory=list)
    summary: str = ""


@dataclass
class LegalAnalysis(DomainRecord):
    LIST_FIELDS: ClassVar[tuple[str, ...]] = ("legal_risks", "recommended_steps")

    legal_risks: list[str] = field(default_factory=list)
    recommended_steps: list[str] = field(default_factory=list)
    summary: str = ""


@dataclass
class SwotAnalysis(DomainRecord):
    LIST_FIELDS: ClassVar[tuple[str, ...]] = (
        "strengths",
        "weaknesses",
        "opportunities",
        "threats",
        "scenarios",
    )

    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)
    opportunities: list[str] = field(default_factory=list)
    threats: list[str] = field(default_factory=list)
    scenarios: list[str] = field(default_factory=list)
    summary: str = ""


@dataclass
class CanonicalResult:
    """Domain-separated output of normalization.

    A domain record is ``None`` when the domain was not detected at all,
    which is distinct from a record whose fields are all empty.
    """

    idea_validation: IdeaValidation | None = None
    legal_analysis: LegalAnalysis | None = None
    swot_analysis: SwotAnalysis | None = None
    overall_summary: str = ""

    @property
    def has_structured_data(self) -> bool:
        """True when at least one domain record is present.

        The overall summary on its own does not count: without a domain
        record the consumer falls back to the raw envelope log.
        """
        return any(
            record is not None
            for record in (self.idea_validation, self.legal_analysis, self.swot_analysis)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "idea_validation": self.idea_validation.to_dict() if self.idea_validation else None,
            "legal_analysis": self.legal_analysis.to_dict() if self.legal_analysis else None,
            "swot_analysis": self.swot_analysis.to_dict() if self.swot_analysis else None,
            "overall_summary": self.overall_summary,
        }
