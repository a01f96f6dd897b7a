"""Public API for lineage resolution."""

from __future__ import annotations

from .resolver import LineageResolver, LineageStep, TaxonLookup, resolve_lineage

__all__ = ["LineageResolver", "LineageStep", "TaxonLookup", "resolve_lineage"]
