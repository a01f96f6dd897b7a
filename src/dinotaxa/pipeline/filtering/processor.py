"""Species filter orchestration over a raw candidate list."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from dinotaxa.config.policies import FilterPolicy
from dinotaxa.entities.core import CandidateSpecies
from dinotaxa.utils.logging import get_logger

from .rules import ExclusionRuleEngine

_LOGGER = get_logger(module=__name__)


@dataclass
class FilterResult:
    """Survivors, exclusions and per-rule counts from one filtering pass."""

    kept: List[CandidateSpecies] = field(default_factory=list)
    excluded: List[Tuple[CandidateSpecies, List[str]]] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)


class SpeciesFilter:
    """Drop trace fossils, egg fossils and extant birds from candidate lists.

    Filtering is pure and order-preserving for survivors; the only side
    effect is a summary log line per :meth:`apply` call.
    """

    def __init__(self, policy: FilterPolicy | None = None) -> None:
        self.policy = policy or FilterPolicy()
        self.engine = ExclusionRuleEngine(self.policy)

    def exclusion_reasons(self, candidate: CandidateSpecies) -> List[str]:
        return self.engine.evaluate(candidate).reasons

    def is_filtered(self, candidate: CandidateSpecies) -> bool:
        """Return True when any exclusion rule matches."""

        return self.engine.evaluate(candidate).excluded

    def apply(self, candidates: Iterable[CandidateSpecies]) -> FilterResult:
        result = FilterResult()
        stats: Dict[str, int] = {"candidates_in": 0, "kept": 0, "excluded": 0}
        for candidate in candidates:
            stats["candidates_in"] += 1
            evaluation = self.engine.evaluate(candidate)
            if not evaluation.excluded:
                result.kept.append(candidate)
                stats["kept"] += 1
                continue
            result.excluded.append((candidate, evaluation.reasons))
            stats["excluded"] += 1
            for reason in evaluation.reasons:
                key = f"excluded_{reason}"
                stats[key] = stats.get(key, 0) + 1
        result.stats = stats
        _LOGGER.info(
            "Filtered candidate species",
            lists_version=self.policy.lists_version,
            **stats,
        )
        return result


def is_filtered(candidate: CandidateSpecies, policy: FilterPolicy | None = None) -> bool:
    """Convenience wrapper around :meth:`SpeciesFilter.is_filtered`."""

    return SpeciesFilter(policy).is_filtered(candidate)


__all__ = ["FilterResult", "SpeciesFilter", "is_filtered"]
