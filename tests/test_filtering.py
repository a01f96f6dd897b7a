"""Tests for the species exclusion rules."""

from __future__ import annotations

import pytest

from dinotaxa.config.policies import DEFAULT_ICHNOGENERA, FilterPolicy
from dinotaxa.entities.core import CandidateSpecies
from dinotaxa.pipeline.filtering import (
    EGG_FOSSIL,
    ICHNO_SUFFIX,
    ICHNOGENUS,
    MODERN_BIRD,
    SpeciesFilter,
    is_filtered,
)


def make_candidate(name: str, *, parent: str = "", family: str | None = None, group: str = "Theropoda") -> CandidateSpecies:
    return CandidateSpecies(name=name, parent=parent, family=family, group=group)


@pytest.fixture
def species_filter() -> SpeciesFilter:
    return SpeciesFilter(FilterPolicy())


@pytest.mark.parametrize("genus", DEFAULT_ICHNOGENERA)
def test_every_ichnogenus_is_filtered(species_filter: SpeciesFilter, genus: str) -> None:
    assert species_filter.is_filtered(make_candidate(f"{genus} sp."))


@pytest.mark.parametrize(
    "name",
    ["Fakeosaurus tracksichnus", "Novumgenus bigpes", "Minor someichnites", "Thing MANUS", "Oddpodus"],
)
def test_trace_suffix_excluded_regardless_of_genus(species_filter: SpeciesFilter, name: str) -> None:
    candidate = make_candidate(name)
    assert species_filter.is_filtered(candidate)
    assert species_filter.exclusion_reasons(candidate) == [ICHNO_SUFFIX]


def test_egg_marker_matches_name_or_parent_case_insensitively(species_filter: SpeciesFilter) -> None:
    by_name = make_candidate("Macroolithus yaotunensis")
    by_parent = make_candidate("Foo bar", parent="MACROOLITHUS")
    assert species_filter.exclusion_reasons(by_name) == [EGG_FOSSIL]
    assert species_filter.exclusion_reasons(by_parent) == [EGG_FOSSIL]


def test_modern_bird_family_excluded(species_filter: SpeciesFilter) -> None:
    assert species_filter.exclusion_reasons(make_candidate("Pandion haliaetus", family="Pandionidae")) == [MODERN_BIRD]
    assert not species_filter.is_filtered(make_candidate("Allosaurus fragilis", family="Allosauridae"))
    assert not species_filter.is_filtered(make_candidate("Allosaurus fragilis"))


def test_multiple_reasons_are_reported(species_filter: SpeciesFilter) -> None:
    reasons = species_filter.exclusion_reasons(make_candidate("Grallator oolithuspes"))
    assert reasons == [ICHNOGENUS, ICHNO_SUFFIX, EGG_FOSSIL]


def test_theropoda_scenario_keeps_exactly_one(species_filter: SpeciesFilter) -> None:
    raw = [
        make_candidate("Grallator sp."),
        make_candidate("Archaeopteryx oolithus-form"),
        make_candidate("Tyrannosaurus rex", family="Tyrannosauridae"),
    ]
    result = species_filter.apply(raw)

    assert [candidate.name for candidate in result.kept] == ["Tyrannosaurus rex"]
    assert result.stats["candidates_in"] == 3
    assert result.stats["excluded"] == 2
    assert result.stats["excluded_ichnogenus"] == 1
    assert result.stats["excluded_egg_fossil"] == 1


def test_apply_preserves_survivor_order(species_filter: SpeciesFilter) -> None:
    names = ["Zuul crurivastator", "Eubrontes giganteus", "Allosaurus fragilis", "Ankylosaurus magniventris"]
    result = species_filter.apply(make_candidate(name) for name in names)
    assert [candidate.name for candidate in result.kept] == [
        "Zuul crurivastator",
        "Allosaurus fragilis",
        "Ankylosaurus magniventris",
    ]
    assert [candidate.name for candidate, _ in result.excluded] == ["Eubrontes giganteus"]


def test_lists_are_configuration() -> None:
    policy = FilterPolicy(ichnogenera=["Allosaurus"], ichno_suffixes=[], modern_bird_families=[])
    assert is_filtered(make_candidate("Allosaurus fragilis"), policy)
    assert not is_filtered(make_candidate("Grallator sp."), policy)
