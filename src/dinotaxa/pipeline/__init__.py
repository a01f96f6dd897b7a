"""Pipeline stages: filtering, deduplication, lineage resolution and tree assembly."""

from __future__ import annotations

from .deduplication import DeduplicationResult, Deduplicator
from .filtering import FilterResult, SpeciesFilter
from .hierarchy_assembly import TaxonomyTree, TreeBuilder, TreeBuildResult, build_tree
from .lineage import LineageResolver, LineageStep

__all__ = [
    "DeduplicationResult",
    "Deduplicator",
    "FilterResult",
    "LineageResolver",
    "LineageStep",
    "SpeciesFilter",
    "TaxonomyTree",
    "TreeBuildResult",
    "TreeBuilder",
    "build_tree",
]
