"""Tests for core entity models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dinotaxa.entities.core import (
    CandidateSpecies,
    Lineage,
    LineageTermination,
    RunSummary,
    TaxonRecord,
    normalize_taxon_id,
    rank_code,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("txn:38613", "38613"), (38613, "38613"), (" 42 ", "42"), ("0", None), ("", None), (None, None)],
)
def test_normalize_taxon_id(raw, expected) -> None:
    assert normalize_taxon_id(raw) == expected


def test_rank_code_mapping() -> None:
    assert rank_code("species") == 3
    assert rank_code("Genus") == 5
    assert rank_code("unranked clade") == 25
    assert rank_code(9) == 9
    assert rank_code("13") == 13
    assert rank_code("mystery") == 0
    assert rank_code(None) == 0


def test_taxon_record_rejects_self_parent() -> None:
    with pytest.raises(ValidationError):
        TaxonRecord(id="txn:5", name="Loop", parent_id="5")


def test_taxon_record_is_frozen() -> None:
    record = TaxonRecord(id="1", name="Dinosauria", rank="unranked clade")
    assert record.is_root
    assert record.rank == 25
    with pytest.raises(ValidationError):
        record.name = "Other"


def test_candidate_genus_and_parent_default() -> None:
    candidate = CandidateSpecies(name="Allosaurus fragilis", group="Theropoda", parent=None)
    assert candidate.genus == "Allosaurus"
    assert candidate.parent == ""


def test_lineage_completeness() -> None:
    assert Lineage(species_id="S", taxon_ids=["R", "S"]).complete
    assert not Lineage(species_id="S", taxon_ids=["B", "S"], terminated_by=LineageTermination.ORPHAN).complete
    assert not Lineage(species_id="S", taxon_ids=[]).complete


def test_run_summary_records_failures() -> None:
    summary = RunSummary(run_id="r1")
    summary.record_success()
    summary.record_failure("Foo bar", "not_found")
    summary.record_failure("Baz qux", "lineage_too_deep", "cycle")

    assert summary.succeeded == 1
    assert summary.failed == 2
    assert summary.failure_reasons == {"not_found": 1, "lineage_too_deep": 1}
    assert summary.failed_units[1] == {"unit": "Baz qux", "reason": "lineage_too_deep", "detail": "cycle"}
