"""Result normalization: upstream output to canonical typed records."""

from azext_ideafy.results.models import (
    CanonicalResult,
    IdeaValidation,
    LegalAnalysis,
    SwotAnalysis,
)
from azext_ideafy.results.normalizer import ResultNormalizer, normalize_results

__all__ = [
    "CanonicalResult",
    "IdeaValidation",
    "LegalAnalysis",
    "SwotAnalysis",
    "ResultNormalizer",
    "normalize_results",
]
