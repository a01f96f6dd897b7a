"""High-level orchestration entry points for a full ingestion run."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from dinotaxa.config.settings import Settings
from dinotaxa.enrichment import MeasurementIndex
from dinotaxa.entities.core import (
    CandidateSpecies,
    Lineage,
    RunSummary,
    SpeciesEntry,
    TaxonRecord,
)
from dinotaxa.errors import LineageTooDeep, RootNotFound, SourceUnavailable
from dinotaxa.pipeline.deduplication import Deduplicator
from dinotaxa.pipeline.filtering import SpeciesFilter
from dinotaxa.pipeline.hierarchy_assembly import TaxonomyTree, TreeBuilder, TreeBuildResult
from dinotaxa.pipeline.lineage import LineageResolver
from dinotaxa.source import SourceClient, TaxonCache, build_source_client
from dinotaxa.utils.logging import get_logger, log_timing, logging_context

from .io import write_run_outputs

_LOGGER = get_logger(module=__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class SpeciesOutcome:
    """Result of resolving one accepted species on a worker thread."""

    candidate: CandidateSpecies
    record: TaxonRecord | None = None
    lineage: Lineage | None = None
    failure: str | None = None
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return self.failure is None


@dataclass
class RunResult:
    summary: RunSummary
    species: List[SpeciesEntry] = field(default_factory=list)
    taxa: List[TaxonRecord] = field(default_factory=list)
    build: TreeBuildResult | None = None
    artifacts: Dict[str, Path] = field(default_factory=dict)

    @property
    def tree(self) -> TaxonomyTree | None:
        return self.build.tree if self.build is not None else None


def format_ma(value: float | None) -> str:
    if value is None:
        return "N/A"
    return str(int(value)) if float(value).is_integer() else str(value)


def build_species_entry(
    outcome: SpeciesOutcome,
    measurements: MeasurementIndex | None = None,
) -> SpeciesEntry:
    """Flatten a successful outcome into the persisted species row."""

    candidate = outcome.candidate
    record = outcome.record
    lineage = outcome.lineage
    length, weight = measurements.lookup(candidate.name) if measurements else (None, None)
    return SpeciesEntry(
        id=record.id,
        name=candidate.name,
        taxon_id=lineage.taxon_ids[-1],
        lineage=list(lineage.taxon_ids),
        group=candidate.group,
        family=candidate.family,
        description=f"Order: {candidate.group}, Family: {candidate.family or 'N/A'}",
        time_range=(
            f"{format_ma(candidate.first_appearance_ma)} - "
            f"{format_ma(candidate.last_appearance_ma)} Ma"
        ),
        first_appearance=candidate.first_appearance_ma,
        last_appearance=candidate.last_appearance_ma,
        length=length,
        weight=weight,
    )


class IngestionPipeline:
    """Coordinates fetch, filter, dedup, lineage resolution and tree assembly.

    Group fetches and per-species resolutions fan out on thread pools bounded
    by ``SourcePolicy.max_workers``. Results come back in input order to the
    calling thread, which alone touches the summary, the species rows and
    the tree.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        client: SourceClient,
        cache: TaxonCache | None = None,
        measurements: MeasurementIndex | None = None,
    ) -> None:
        self._settings = settings
        policies = settings.policies
        self.client = client
        self.cache = cache if cache is not None else TaxonCache()
        self.measurements = measurements or MeasurementIndex(policy=policies.enrichment)
        self.species_filter = SpeciesFilter(policies.filtering)
        self.deduplicator = Deduplicator()
        self.resolver = LineageResolver(client, self.cache, policies.lineage)
        self.tree_builder = TreeBuilder(policies.hierarchy)
        self._max_workers = policies.source.max_workers

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        client: SourceClient | None = None,
        cache: TaxonCache | None = None,
        measurements: MeasurementIndex | None = None,
    ) -> "IngestionPipeline":
        policies = settings.policies
        return cls(
            settings=settings,
            client=client or build_source_client(policies.source),
            cache=cache,
            measurements=measurements or MeasurementIndex.from_policy(policies.enrichment),
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def collect_species(
        self,
        summary: RunSummary,
        groups: Sequence[str] | None = None,
    ) -> List[CandidateSpecies]:
        """Fetch, filter and deduplicate; return accepted species sorted by name."""

        with logging_context(step="fetch"), log_timing("fetch", logger_=_LOGGER) as timing:
            fetched = self.client.fetch_groups(groups)
            timing["species"] = len(fetched.species)
        summary.groups_requested = fetched.groups_requested
        summary.groups_failed = sorted(fetched.failed)
        summary.candidates_fetched = len(fetched.species)

        with logging_context(step="filter"):
            filtered = self.species_filter.apply(fetched.species)
        summary.candidates_filtered = len(filtered.excluded)
        summary.filter_reasons = {
            key[len("excluded_") :]: value
            for key, value in sorted(filtered.stats.items())
            if key.startswith("excluded_")
        }

        with logging_context(step="deduplicate"):
            deduplicated = self.deduplicator.process(filtered.kept)
        summary.duplicates_dropped = len(deduplicated.duplicates)

        return sorted(deduplicated.species, key=lambda candidate: candidate.name)

    def resolve_species(self, candidate: CandidateSpecies) -> SpeciesOutcome:
        """Name resolution plus ancestor walk for one species; never raises for data errors."""

        try:
            lineage = self.resolver.resolve_name(candidate.name)
        except SourceUnavailable as exc:
            return SpeciesOutcome(candidate, failure="source_unavailable", detail=str(exc))
        except LineageTooDeep as exc:
            return SpeciesOutcome(candidate, failure="lineage_too_deep", detail=str(exc))
        if lineage is None:
            return SpeciesOutcome(candidate, failure="not_found")
        record = self.cache.get(lineage.species_id)
        if not lineage.complete:
            return SpeciesOutcome(
                candidate,
                record=record,
                lineage=lineage,
                failure="incomplete_lineage",
                detail=lineage.terminated_by.value,
            )
        return SpeciesOutcome(candidate, record=record, lineage=lineage)

    def build(self, lineages: Sequence[Lineage]) -> TreeBuildResult | None:
        try:
            return self.tree_builder.build(lineages, self.cache)
        except RootNotFound as exc:
            _LOGGER.error("Cannot build taxonomy tree", error=str(exc))
            return None

    # ------------------------------------------------------------------
    # Primary entry point
    # ------------------------------------------------------------------
    def run(
        self,
        *,
        groups: Sequence[str] | None = None,
        limit: int | None = None,
        run_id: str | None = None,
        progress: ProgressCallback | None = None,
    ) -> RunResult:
        run_id = run_id or datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        summary = RunSummary(run_id=run_id)

        with logging_context(run_id=run_id, step="orchestration"):
            accepted = self.collect_species(summary, groups)
            if limit is not None:
                accepted = accepted[: max(limit, 0)]
            total = len(accepted)
            _LOGGER.info("Resolving lineages", species=total, workers=self._max_workers)

            resolved: List[SpeciesOutcome] = []
            seen_ids: set = set()
            with logging_context(step="lineage"), ThreadPoolExecutor(
                max_workers=self._max_workers
            ) as executor:
                for outcome in executor.map(self.resolve_species, accepted):
                    summary.processed += 1
                    if outcome.succeeded and outcome.lineage.species_id in seen_ids:
                        outcome.failure = "duplicate_species_id"
                        outcome.detail = outcome.lineage.species_id
                    if outcome.succeeded:
                        seen_ids.add(outcome.lineage.species_id)
                        resolved.append(outcome)
                    else:
                        summary.record_failure(outcome.candidate.name, outcome.failure, outcome.detail)
                        _LOGGER.warning(
                            "Species failed",
                            species=outcome.candidate.name,
                            reason=outcome.failure,
                            detail=outcome.detail,
                        )
                    if progress is not None:
                        progress(summary.processed, total)

            with logging_context(step="tree"), log_timing("tree", logger_=_LOGGER, lineages=len(resolved)):
                build = self.build([outcome.lineage for outcome in resolved])
            rejected = {
                entry["species_id"]: entry["reason"] for entry in (build.rejected if build else [])
            }

            entries: List[SpeciesEntry] = []
            lineages: List[Lineage] = []
            for outcome in resolved:
                species_id = outcome.lineage.species_id
                if species_id in rejected:
                    summary.record_failure(outcome.candidate.name, rejected[species_id], species_id)
                    continue
                summary.record_success()
                lineages.append(outcome.lineage)
                entries.append(build_species_entry(outcome, self.measurements))

            if build is not None:
                summary.tree_built = True
                summary.tree_stats = dict(
                    build.tree.statistics(),
                    merged=build.merged,
                    rejected=len(build.rejected),
                    conflicts=len(build.conflicts),
                )

            summary.finished_at = datetime.now(timezone.utc)
            _LOGGER.info(
                "Run complete",
                processed=summary.processed,
                succeeded=summary.succeeded,
                failed=summary.failed,
                tree_built=summary.tree_built,
            )

        taxa = self._lineage_taxa(lineages)
        entries.sort(key=lambda entry: entry.id)
        return RunResult(summary=summary, species=entries, taxa=taxa, build=build)

    def _lineage_taxa(self, lineages: Sequence[Lineage]) -> List[TaxonRecord]:
        wanted = {taxon_id for lineage in lineages for taxon_id in lineage.taxon_ids}
        records = [self.cache.get(taxon_id) for taxon_id in sorted(wanted)]
        return [record for record in records if record is not None]


def run_ingestion(
    *,
    settings: Settings,
    client: SourceClient | None = None,
    groups: Sequence[str] | None = None,
    limit: int | None = None,
    run_id: Optional[str] = None,
    output_dir: Path | None = None,
    taxon_cache_path: Path | None = None,
    measurements: MeasurementIndex | None = None,
    progress: ProgressCallback | None = None,
) -> RunResult:
    """Run the pipeline end to end and write its artefacts."""

    cache = TaxonCache.load(taxon_cache_path) if taxon_cache_path else TaxonCache()
    pipeline = IngestionPipeline.from_settings(
        settings, client=client, cache=cache, measurements=measurements
    )
    result = pipeline.run(groups=groups, limit=limit, run_id=run_id, progress=progress)
    destination = output_dir or Path(settings.paths.output_dir)
    result.artifacts = write_run_outputs(result, destination)
    if taxon_cache_path:
        cache.save(taxon_cache_path)
        result.artifacts["taxon_cache"] = Path(taxon_cache_path)
    return result


__all__ = [
    "IngestionPipeline",
    "RunResult",
    "SpeciesOutcome",
    "build_species_entry",
    "format_ma",
    "run_ingestion",
]
