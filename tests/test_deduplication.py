"""Tests for first-occurrence-wins deduplication."""

from __future__ import annotations

from dinotaxa.entities.core import CandidateSpecies
from dinotaxa.pipeline.deduplication import Deduplicator, deduplicate


def test_first_occurrence_wins_field_for_field() -> None:
    first = CandidateSpecies(
        name="Tyrannosaurus rex",
        group="Theropoda",
        family="Tyrannosauridae",
        first_appearance_ma=68.0,
        last_appearance_ma=66.0,
    )
    later = CandidateSpecies(name="Tyrannosaurus rex", group="Saurischia", family=None)
    other = CandidateSpecies(name="Allosaurus fragilis", group="Theropoda")

    result = Deduplicator().process([first, other, later])

    assert [candidate.name for candidate in result.species] == ["Tyrannosaurus rex", "Allosaurus fragilis"]
    assert result.species[0] == first
    assert result.species[0].group == "Theropoda"
    assert result.duplicates == [later]
    assert result.stats["candidates_in"] == 3
    assert result.stats["unique"] == 2
    assert result.stats["duplicates_dropped"] == 1
    assert result.stats["duplicates_by_group"] == {"Saurischia": 1}


def test_name_key_is_case_sensitive() -> None:
    records = [
        CandidateSpecies(name="Allosaurus fragilis", group="Theropoda"),
        CandidateSpecies(name="allosaurus fragilis", group="Theropoda"),
    ]
    assert len(deduplicate(records)) == 2


def test_output_has_one_record_per_name() -> None:
    names = ["B b", "A a", "B b", "C c", "A a", "B b"]
    records = [CandidateSpecies(name=name, group=f"G{i}") for i, name in enumerate(names)]
    kept = deduplicate(records)
    assert [record.name for record in kept] == ["B b", "A a", "C c"]
    assert [record.group for record in kept] == ["G0", "G1", "G3"]


def test_empty_input() -> None:
    result = Deduplicator().process([])
    assert result.species == []
    assert result.stats["unique"] == 0
