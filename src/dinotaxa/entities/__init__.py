"""Domain entities for the ingestion pipeline."""

from .core import (
    RANK_CODES,
    SPECIES_RANK,
    AcceptedSpecies,
    CandidateSpecies,
    Lineage,
    LineageTermination,
    Measurement,
    RunSummary,
    SpeciesEntry,
    TaxonRecord,
    normalize_taxon_id,
    rank_code,
)

__all__ = [
    "RANK_CODES",
    "SPECIES_RANK",
    "AcceptedSpecies",
    "CandidateSpecies",
    "Lineage",
    "LineageTermination",
    "Measurement",
    "RunSummary",
    "SpeciesEntry",
    "TaxonRecord",
    "normalize_taxon_id",
    "rank_code",
]
