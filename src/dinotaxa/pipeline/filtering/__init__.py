"""Public API for species filtering."""

from __future__ import annotations

from .processor import FilterResult, SpeciesFilter, is_filtered
from .rules import (
    EGG_FOSSIL,
    ICHNO_SUFFIX,
    ICHNOGENUS,
    MODERN_BIRD,
    ExclusionRuleEngine,
    RuleEvaluation,
)

__all__ = [
    "EGG_FOSSIL",
    "ICHNOGENUS",
    "ICHNO_SUFFIX",
    "MODERN_BIRD",
    "ExclusionRuleEngine",
    "FilterResult",
    "RuleEvaluation",
    "SpeciesFilter",
    "is_filtered",
]
