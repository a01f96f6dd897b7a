"""Idempotent run artefacts and offline reload for tree rebuilds."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, List

from pydantic import ValidationError

from dinotaxa.config.policies import TreeBuildPolicy
from dinotaxa.entities.core import SpeciesEntry, TaxonRecord
from dinotaxa.pipeline.hierarchy_assembly import (
    TreeBuilder,
    TreeBuildResult,
    export_tree,
    write_build_manifest,
)
from dinotaxa.utils.helpers import ensure_directory, load_json, serialize_json
from dinotaxa.utils.logging import get_logger

if TYPE_CHECKING:
    from .main import RunResult

_LOGGER = get_logger(module=__name__)

TAXA_FILE = "taxa.json"
SPECIES_FILE = "species.json"
TREE_FILE = "tree.json"
TREE_BUILD_FILE = "tree_build.json"
SUMMARY_FILE = "summary.json"


def write_run_outputs(result: "RunResult", output_dir: Path | str) -> Dict[str, Path]:
    """Write taxa, species, tree and summary files keyed and sorted by id.

    Everything except ``summary.json`` is byte-identical across re-runs
    against the same upstream snapshot. ``tree.json`` is only written when a
    tree was built.
    """

    directory = ensure_directory(output_dir)
    artifacts: Dict[str, Path] = {}

    taxa = sorted(result.taxa, key=lambda record: record.id)
    artifacts["taxa"] = serialize_json(
        {"taxa": [record.model_dump(mode="json") for record in taxa]},
        directory / TAXA_FILE,
    )
    species = sorted(result.species, key=lambda entry: entry.id)
    artifacts["species"] = serialize_json(
        {"species": [entry.model_dump(mode="json") for entry in species]},
        directory / SPECIES_FILE,
    )
    if result.build is not None:
        artifacts["tree"] = export_tree(result.build.tree, directory / TREE_FILE, format="json")
        artifacts["tree_build"] = write_build_manifest(result.build, directory / TREE_BUILD_FILE)
    else:
        for stale_name in (TREE_FILE, TREE_BUILD_FILE):
            stale = directory / stale_name
            if stale.exists():
                stale.unlink()
    artifacts["summary"] = serialize_json(
        result.summary.model_dump(mode="json"),
        directory / SUMMARY_FILE,
    )
    _LOGGER.info(
        "Wrote run artefacts",
        output_dir=str(directory),
        taxa=len(taxa),
        species=len(species),
        tree=result.build is not None,
    )
    return artifacts


def load_taxa(path: Path | str) -> Dict[str, TaxonRecord]:
    payload = load_json(path)
    records: Dict[str, TaxonRecord] = {}
    for entry in payload.get("taxa", []):
        try:
            record = TaxonRecord.model_validate(entry)
        except ValidationError:
            _LOGGER.warning("Skipping invalid taxon row", entry=entry)
            continue
        records[record.id] = record
    return records


def load_species(path: Path | str) -> List[SpeciesEntry]:
    payload = load_json(path)
    entries: List[SpeciesEntry] = []
    for entry in payload.get("species", []):
        try:
            entries.append(SpeciesEntry.model_validate(entry))
        except ValidationError:
            _LOGGER.warning("Skipping invalid species row", entry=entry)
    return entries


def rebuild_tree(
    input_dir: Path | str,
    policy: TreeBuildPolicy | None = None,
) -> TreeBuildResult:
    """Rebuild a tree offline from ``taxa.json`` and ``species.json``."""

    directory = Path(input_dir)
    taxa = load_taxa(directory / TAXA_FILE)
    species = sorted(load_species(directory / SPECIES_FILE), key=lambda entry: entry.name)
    lineages = [entry.lineage for entry in species]
    _LOGGER.info("Rebuilding tree from artefacts", taxa=len(taxa), species=len(species))
    return TreeBuilder(policy).build(lineages, taxa)


__all__ = [
    "SPECIES_FILE",
    "SUMMARY_FILE",
    "TAXA_FILE",
    "TREE_BUILD_FILE",
    "TREE_FILE",
    "load_species",
    "load_taxa",
    "rebuild_tree",
    "write_run_outputs",
]
