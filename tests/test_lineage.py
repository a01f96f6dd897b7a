"""Tests for bounded ancestor-chain resolution."""

from __future__ import annotations

from typing import Dict

import pytest

from dinotaxa.config.policies import LineagePolicy
from dinotaxa.entities.core import LineageTermination, TaxonRecord
from dinotaxa.errors import LineageTooDeep, SourceUnavailable
from dinotaxa.pipeline.lineage import LineageResolver
from dinotaxa.source import TaxonCache


class FakeLookup:
    def __init__(self, records: Dict[str, TaxonRecord], *, unavailable: set[str] | None = None) -> None:
        self.records = records
        self.unavailable = unavailable or set()
        self.lookups: list[str] = []

    def fetch_taxon_by_id(self, taxon_id: str) -> TaxonRecord | None:
        self.lookups.append(taxon_id)
        if taxon_id in self.unavailable:
            raise SourceUnavailable("down", url="fake")
        return self.records.get(taxon_id)

    def fetch_species_by_name(self, name: str) -> TaxonRecord | None:
        for record in self.records.values():
            if record.name == name and record.rank == 3:
                return record
        return None


def chain(*rows: tuple) -> Dict[str, TaxonRecord]:
    return {
        taxon_id: TaxonRecord(id=taxon_id, name=name, rank=rank, parent_id=parent)
        for taxon_id, name, rank, parent in rows
    }


@pytest.fixture
def simple_records() -> Dict[str, TaxonRecord]:
    return chain(
        ("A", "Dinosauria", 25, None),
        ("B", "Genus1", 5, "A"),
        ("S", "Genus1 species", 3, "B"),
    )


def test_lineage_is_root_first(simple_records) -> None:
    resolver = LineageResolver(FakeLookup(simple_records), TaxonCache())
    lineage = resolver.resolve_lineage("S")

    assert lineage.taxon_ids == ["A", "B", "S"]
    assert lineage.terminated_by is LineageTermination.ROOT
    assert lineage.complete
    assert lineage.root_id == "A"


def test_stops_at_root_name_even_with_parent(simple_records) -> None:
    records = dict(simple_records)
    records["A"] = TaxonRecord(id="A", name="Dinosauria", rank=25, parent_id="Z")
    records["Z"] = TaxonRecord(id="Z", name="Archosauria", rank=25)
    lookup = FakeLookup(records)

    lineage = LineageResolver(lookup).resolve_lineage("S")

    assert lineage.taxon_ids == ["A", "B", "S"]
    assert "Z" not in lookup.lookups


def test_missing_lookup_returns_partial_chain(simple_records) -> None:
    records = dict(simple_records)
    del records["A"]
    lineage = LineageResolver(FakeLookup(records)).resolve_lineage("S")

    assert lineage.taxon_ids == ["B", "S"]
    assert lineage.terminated_by is LineageTermination.MISSING
    assert not lineage.complete


def test_unavailable_source_returns_partial_chain(simple_records) -> None:
    lookup = FakeLookup(simple_records, unavailable={"B"})
    lineage = LineageResolver(lookup).resolve_lineage("S")

    assert lineage.taxon_ids == ["S"]
    assert lineage.terminated_by is LineageTermination.UNAVAILABLE


def test_null_parent_before_root_is_orphan() -> None:
    records = chain(("B", "Genus1", 5, None), ("S", "Genus1 species", 3, "B"))
    lineage = LineageResolver(FakeLookup(records)).resolve_lineage("S")

    assert lineage.taxon_ids == ["B", "S"]
    assert lineage.terminated_by is LineageTermination.ORPHAN


def test_cycle_raises_lineage_too_deep() -> None:
    records = chain(("X", "Loop one", 5, "Y"), ("Y", "Loop two", 5, "X"), ("S", "Loop species", 3, "X"))
    with pytest.raises(LineageTooDeep) as excinfo:
        LineageResolver(FakeLookup(records)).resolve_lineage("S")
    assert excinfo.value.species_id == "S"
    assert excinfo.value.partial == ["Y", "X", "S"]


def test_depth_bound_raises() -> None:
    rows = [(f"T{i}", f"Taxon {i}", 25, f"T{i + 1}") for i in range(10)]
    records = chain(*rows)
    resolver = LineageResolver(FakeLookup(records), policy=LineagePolicy(max_depth=5))

    with pytest.raises(LineageTooDeep) as excinfo:
        resolver.resolve_lineage("T0")
    assert excinfo.value.max_depth == 5
    assert len(excinfo.value.partial) == 5


def test_step_prefers_cache_and_populates_it(simple_records) -> None:
    lookup = FakeLookup(simple_records)
    cache = TaxonCache()
    resolver = LineageResolver(lookup, cache)

    first = resolver.step("B")
    second = resolver.step("B")

    assert first.found and not first.from_cache
    assert second.found and second.from_cache
    assert lookup.lookups == ["B"]
    assert "B" in cache


def test_shared_ancestors_fetched_once(simple_records) -> None:
    records = dict(simple_records)
    records["S2"] = TaxonRecord(id="S2", name="Genus1 other", rank=3, parent_id="B")
    lookup = FakeLookup(records)
    resolver = LineageResolver(lookup, TaxonCache())

    resolver.resolve_lineage("S")
    resolver.resolve_lineage("S2")

    assert sorted(lookup.lookups) == ["A", "B", "S", "S2"]


def test_resolve_name(simple_records) -> None:
    resolver = LineageResolver(FakeLookup(simple_records))
    lineage = resolver.resolve_name("Genus1 species")
    assert lineage is not None and lineage.taxon_ids == ["A", "B", "S"]
    assert resolver.resolve_name("Nothing here") is None


def test_prefixed_ids_are_normalised(simple_records) -> None:
    lineage = LineageResolver(FakeLookup(simple_records)).resolve_lineage("txn:S")
    assert lineage.species_id == "S"


def test_lineage_keeps_requested_id_when_lookup_returns_another(simple_records) -> None:
    records = dict(simple_records)
    records["S"] = TaxonRecord(id="S2", name="Genus1 species", rank=3, parent_id="B")
    lookup = FakeLookup(records)
    cache = TaxonCache()
    resolver = LineageResolver(lookup, cache)

    lineage = resolver.resolve_lineage("S")

    assert lineage.taxon_ids == ["A", "B", "S"]
    assert lineage.complete
    assert cache.get("S").name == "Genus1 species"

    resolver.resolve_lineage("S")
    assert lookup.lookups.count("S") == 1
