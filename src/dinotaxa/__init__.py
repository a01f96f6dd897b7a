"""Top-level package for the dinosaur taxonomy ingestion pipeline."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dinotaxa")
except PackageNotFoundError:  # pragma: no cover - source checkout without install
    __version__ = "0.1.0"

from .config.settings import Settings, get_settings
from .entities import (
    AcceptedSpecies,
    CandidateSpecies,
    Lineage,
    SpeciesEntry,
    TaxonRecord,
)

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "AcceptedSpecies",
    "CandidateSpecies",
    "Lineage",
    "SpeciesEntry",
    "TaxonRecord",
]
