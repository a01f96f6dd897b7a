"""First-occurrence-wins deduplication of candidate species by exact name."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from dinotaxa.entities.core import CandidateSpecies
from dinotaxa.utils.logging import get_logger

_LOGGER = get_logger(module=__name__)


@dataclass
class DeduplicationResult:
    """Aggregate result from deduplication processing."""

    species: List[CandidateSpecies]
    duplicates: List[CandidateSpecies] = field(default_factory=list)
    stats: Dict[str, object] = field(default_factory=dict)


class Deduplicator:
    """Collapse overlapping group fetches to one record per scientific name.

    The key is the exact name string (case-sensitive, no normalisation). The
    first encountered record is retained unchanged; later records with the
    same name are reported as duplicates together with the group they came
    from.
    """

    def process(self, candidates: Iterable[CandidateSpecies]) -> DeduplicationResult:
        retained: Dict[str, CandidateSpecies] = {}
        duplicates: List[CandidateSpecies] = []
        duplicates_by_group: Dict[str, int] = {}
        total = 0
        for candidate in candidates:
            total += 1
            if candidate.name in retained:
                duplicates.append(candidate)
                duplicates_by_group[candidate.group] = duplicates_by_group.get(candidate.group, 0) + 1
                continue
            retained[candidate.name] = candidate

        species = list(retained.values())
        stats: Dict[str, object] = {
            "candidates_in": total,
            "unique": len(species),
            "duplicates_dropped": len(duplicates),
            "duplicates_by_group": dict(sorted(duplicates_by_group.items())),
        }
        _LOGGER.info(
            "Deduplicated candidate species",
            candidates_in=total,
            unique=len(species),
            duplicates_dropped=len(duplicates),
        )
        return DeduplicationResult(species=species, duplicates=duplicates, stats=stats)


def deduplicate(candidates: Iterable[CandidateSpecies]) -> List[CandidateSpecies]:
    return Deduplicator().process(candidates).species


__all__ = ["DeduplicationResult", "Deduplicator", "deduplicate"]
