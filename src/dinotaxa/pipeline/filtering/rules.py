"""Deterministic exclusion rules for non-target species records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from dinotaxa.config.policies import FilterPolicy
from dinotaxa.entities.core import CandidateSpecies
from dinotaxa.utils.helpers import genus_of

ICHNOGENUS = "ichnogenus"
ICHNO_SUFFIX = "ichno_suffix"
EGG_FOSSIL = "egg_fossil"
MODERN_BIRD = "modern_bird"


@dataclass
class RuleEvaluation:
    """Result emitted by :meth:`ExclusionRuleEngine.evaluate`."""

    excluded: bool
    checks: Dict[str, bool]
    reasons: List[str] = field(default_factory=list)


class ExclusionRuleEngine:
    """Apply the ichnofossil, egg-fossil and modern-bird exclusion rules."""

    def __init__(self, policy: FilterPolicy) -> None:
        self._policy = policy
        self._ichnogenera = frozenset(policy.ichnogenera)
        self._suffixes = tuple(policy.ichno_suffixes)
        self._bird_families = frozenset(policy.modern_bird_families)
        self._egg_marker = policy.egg_marker

    @property
    def policy(self) -> FilterPolicy:
        return self._policy

    def check_ichnogenus(self, name: str) -> bool:
        return genus_of(name) in self._ichnogenera

    def check_ichno_suffix(self, name: str) -> Tuple[bool, str | None]:
        lowered = name.lower()
        for suffix in self._suffixes:
            if lowered.endswith(suffix):
                return True, suffix
        return False, None

    def check_egg_fossil(self, name: str, parent: str) -> bool:
        return self._egg_marker in name.lower() or self._egg_marker in (parent or "").lower()

    def check_modern_bird(self, family: str | None) -> bool:
        return bool(family) and family.strip() in self._bird_families

    def evaluate(self, candidate: CandidateSpecies) -> RuleEvaluation:
        suffix_hit, _ = self.check_ichno_suffix(candidate.name)
        checks = {
            ICHNOGENUS: self.check_ichnogenus(candidate.name),
            ICHNO_SUFFIX: suffix_hit,
            EGG_FOSSIL: self.check_egg_fossil(candidate.name, candidate.parent),
            MODERN_BIRD: self.check_modern_bird(candidate.family),
        }
        reasons = [rule for rule, hit in checks.items() if hit]
        return RuleEvaluation(excluded=bool(reasons), checks=checks, reasons=reasons)


__all__ = [
    "EGG_FOSSIL",
    "ICHNOGENUS",
    "ICHNO_SUFFIX",
    "MODERN_BIRD",
    "ExclusionRuleEngine",
    "RuleEvaluation",
]
