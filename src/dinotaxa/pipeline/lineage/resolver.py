"""Ancestor-chain resolution from a species up to the domain root."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol, Set

from dinotaxa.config.policies import LineagePolicy
from dinotaxa.entities.core import Lineage, LineageTermination, TaxonRecord, normalize_taxon_id
from dinotaxa.errors import LineageTooDeep, SourceUnavailable
from dinotaxa.source.cache import TaxonCache
from dinotaxa.utils.logging import get_logger

_LOGGER = get_logger(module=__name__)


class TaxonLookup(Protocol):
    """Subset of :class:`~dinotaxa.source.client.SourceClient` used here."""

    def fetch_taxon_by_id(self, taxon_id: str) -> TaxonRecord | None: ...

    def fetch_species_by_name(self, name: str) -> TaxonRecord | None: ...


@dataclass(frozen=True)
class LineageStep:
    """Outcome of a single point lookup during an ancestor walk."""

    taxon_id: str
    record: TaxonRecord | None = None
    from_cache: bool = False
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.record is not None

    @property
    def termination(self) -> LineageTermination:
        return LineageTermination.UNAVAILABLE if self.error else LineageTermination.MISSING


class LineageResolver:
    """Walk parent links one lookup at a time, bounded by ``max_depth``.

    Every fetched record is written to the shared :class:`TaxonCache` so the
    tree builder can name the nodes later and repeated ancestors are only
    fetched once per run.
    """

    def __init__(
        self,
        client: TaxonLookup,
        cache: TaxonCache | None = None,
        policy: LineagePolicy | None = None,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else TaxonCache()
        self.policy = policy or LineagePolicy()

    def step(self, taxon_id: str) -> LineageStep:
        """Return the record for ``taxon_id`` from the cache or one source lookup."""

        cached = self.cache.get(taxon_id)
        if cached is not None:
            return LineageStep(taxon_id=taxon_id, record=cached, from_cache=True)
        try:
            record = self.client.fetch_taxon_by_id(taxon_id)
        except SourceUnavailable as exc:
            _LOGGER.warning("Taxon lookup failed", taxon_id=taxon_id, error=str(exc))
            return LineageStep(taxon_id=taxon_id, error=str(exc))
        if record is None:
            return LineageStep(taxon_id=taxon_id)
        self.cache.put(record)
        if record.id != taxon_id:
            # the source answered with another number (e.g. an accepted synonym)
            _LOGGER.info("Taxon id resolved to another record", taxon_id=taxon_id, resolved_id=record.id)
            record = record.model_copy(update={"id": taxon_id})
            self.cache.put(record)
        return LineageStep(taxon_id=taxon_id, record=record)

    def resolve_lineage(self, species_id: str) -> Lineage:
        start = normalize_taxon_id(species_id)
        if start is None:
            raise ValueError(f"invalid species id: {species_id!r}")

        chain: List[str] = []
        seen: Set[str] = set()
        current: str | None = start
        terminated_by = LineageTermination.ORPHAN

        for _ in range(self.policy.max_depth):
            if current in seen:
                raise LineageTooDeep(start, self.policy.max_depth, partial=chain)
            seen.add(current)

            outcome = self.step(current)
            if not outcome.found:
                terminated_by = outcome.termination
                break

            record = outcome.record
            chain.insert(0, current)
            if record.name == self.policy.root_name:
                terminated_by = LineageTermination.ROOT
                break
            if record.parent_id is None:
                terminated_by = LineageTermination.ORPHAN
                break
            current = record.parent_id
        else:
            raise LineageTooDeep(start, self.policy.max_depth, partial=chain)

        lineage = Lineage(species_id=start, taxon_ids=chain, terminated_by=terminated_by)
        if not lineage.complete:
            _LOGGER.warning(
                "Lineage did not reach root",
                species_id=start,
                terminated_by=terminated_by.value,
                depth=len(chain),
            )
        return lineage

    def resolve_name(self, name: str) -> Lineage | None:
        """Resolve a scientific name to its species record, then walk its lineage.

        Returns ``None`` when the source has no species under that name.
        """

        record = self.client.fetch_species_by_name(name)
        if record is None:
            return None
        self.cache.put(record)
        return self.resolve_lineage(record.id)


def resolve_lineage(
    species_id: str,
    client: TaxonLookup,
    cache: TaxonCache | None = None,
    policy: LineagePolicy | None = None,
) -> Lineage:
    return LineageResolver(client, cache, policy).resolve_lineage(species_id)


__all__ = ["LineageResolver", "LineageStep", "TaxonLookup", "resolve_lineage"]
