"""Run orchestration: fan-out/fan-in over the pipeline stages and artefact output."""

from __future__ import annotations

from .io import load_species, load_taxa, rebuild_tree, write_run_outputs
from .main import (
    IngestionPipeline,
    RunResult,
    SpeciesOutcome,
    build_species_entry,
    format_ma,
    run_ingestion,
)

__all__ = [
    "IngestionPipeline",
    "RunResult",
    "SpeciesOutcome",
    "build_species_entry",
    "format_ma",
    "load_species",
    "load_taxa",
    "rebuild_tree",
    "run_ingestion",
    "write_run_outputs",
]
