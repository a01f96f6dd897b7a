"""Tests for merging lineages into a rooted taxonomy tree."""

from __future__ import annotations

import json
from typing import Dict

import pytest

from dinotaxa.config.policies import TreeBuildPolicy
from dinotaxa.entities.core import Lineage, TaxonRecord
from dinotaxa.errors import RootNotFound
from dinotaxa.pipeline.hierarchy_assembly import (
    TreeBuilder,
    build_tree,
    export_tree,
    render_dot,
)
from dinotaxa.source import TaxonCache


def make_info(*rows: tuple) -> Dict[str, TaxonRecord]:
    return {
        taxon_id: TaxonRecord(id=taxon_id, name=name, rank=rank, parent_id=parent)
        for taxon_id, name, rank, parent in rows
    }


@pytest.fixture
def taxon_info() -> Dict[str, TaxonRecord]:
    return make_info(
        ("R", "Dinosauria", 25, None),
        ("G1", "Genus1", 5, "R"),
        ("GX", "GenusX", 5, "R"),
        ("GY", "GenusY", 5, "R"),
        ("SA", "Genus1 alpha", 3, "G1"),
        ("SB", "Genus1 beta", 3, "G1"),
        ("SC", "GenusX gamma", 3, "GX"),
    )


def test_shared_genus_node(taxon_info) -> None:
    tree = build_tree([["R", "G1", "SA"], ["R", "G1", "SB"]], taxon_info)

    genus = tree.get("G1")
    assert genus is not None
    assert [child.id for child in genus.children] == ["SA", "SB"]
    assert tree.get("SA").parent is genus
    assert tree.get("SB").parent is genus
    assert len(tree) == 4


def test_species_marked_and_nested_shape(taxon_info) -> None:
    tree = build_tree([Lineage(species_id="SA", taxon_ids=["R", "G1", "SA"])], taxon_info)
    payload = tree.to_dict()

    assert payload == {
        "id": "R",
        "name": "Dinosauria",
        "rank": 25,
        "type": "taxon",
        "children": [
            {
                "id": "G1",
                "name": "Genus1",
                "rank": 5,
                "type": "taxon",
                "children": [
                    {"id": "SA", "name": "Genus1 alpha", "rank": 3, "type": "species", "children": []},
                ],
            }
        ],
    }


def test_strict_policy_rejects_conflicting_lineage(taxon_info) -> None:
    builder = TreeBuilder(TreeBuildPolicy(parentage_policy="strict"))
    result = builder.build([["R", "GX", "SC"], ["R", "GY", "SC"]], taxon_info)

    assert result.merged == 1
    assert result.rejected == [{"species_id": "SC", "reason": "inconsistent_parentage"}]
    assert result.conflicts[0]["existing_parent"] == "GX"
    assert result.conflicts[0]["new_parent"] == "GY"
    assert result.tree.parent_of("SC") == "GX"
    assert "GY" not in result.tree
    assert result.tree.statistics()["duplicated_ids"] == []


def test_permissive_policy_duplicates_and_warns(taxon_info) -> None:
    builder = TreeBuilder(TreeBuildPolicy(parentage_policy="permissive"))
    result = builder.build([["R", "GX", "SC"], ["R", "GY", "SC"]], taxon_info)

    assert result.merged == 2
    assert [node.parent_id for node in result.tree.placements("SC")] == ["GX", "GY"]
    assert result.conflicts[0]["action"] == "duplicated"
    assert result.tree.statistics()["duplicated_ids"] == ["SC"]


@pytest.mark.parametrize("policy", ["strict", "permissive"])
def test_conflict_handling_is_deterministic(taxon_info, policy) -> None:
    lineages = [["R", "GX", "SC"], ["R", "GY", "SC"], ["R", "G1", "SA"]]
    first = build_tree(lineages, taxon_info, TreeBuildPolicy(parentage_policy=policy))
    second = build_tree(lineages, taxon_info, TreeBuildPolicy(parentage_policy=policy))
    assert json.dumps(first.to_dict(), sort_keys=True) == json.dumps(second.to_dict(), sort_keys=True)


def test_missing_root_raises(taxon_info) -> None:
    info = {key: value for key, value in taxon_info.items() if key != "R"}
    with pytest.raises(RootNotFound):
        build_tree([["R", "G1", "SA"]], info)


def test_missing_metadata_uses_placeholder(taxon_info) -> None:
    result = TreeBuilder().build([["R", "G9", "S9"]], taxon_info)
    node = result.tree.get("G9")
    assert (node.name, node.rank) == ("Unknown", 0)
    assert result.placeholders == ["G9", "S9"]


def test_detached_and_repeated_lineages_rejected(taxon_info) -> None:
    result = TreeBuilder().build([["G1", "SA"], [], ["R", "G1", "G1"]], taxon_info)
    assert [entry["reason"] for entry in result.rejected] == ["detached", "empty", "repeated_taxon"]
    assert len(result.tree) == 1


def test_accepts_taxon_cache(taxon_info) -> None:
    cache = TaxonCache(taxon_info.values())
    tree = build_tree([["R", "G1", "SA"]], cache)
    assert tree.path_to("SA") == ["R", "G1", "SA"]


def test_queries_and_statistics(taxon_info) -> None:
    tree = build_tree([["R", "G1", "SA"], ["R", "G1", "SB"], ["R", "GX", "SC"]], taxon_info)

    assert tree.path_to("SC") == ["R", "GX", "SC"]
    assert tree.path_to("missing") == []
    assert tree.subtree("GX")["children"][0]["id"] == "SC"
    assert tree.subtree("missing") is None
    assert [node.id for node in tree.find_by_name("genus1 BETA")] == ["SB"]
    stats = tree.statistics()
    assert stats["node_count"] == 6
    assert stats["species_count"] == 3
    assert stats["max_depth"] == 2
    assert stats["max_out_degree"] == 2
    assert tree.adjacency() == {
        "G1": ["SA", "SB"],
        "GX": ["SC"],
        "R": ["G1", "GX"],
        "SA": [],
        "SB": [],
        "SC": [],
    }


def test_exports(tmp_path, taxon_info) -> None:
    tree = build_tree([["R", "G1", "SA"]], taxon_info)

    json_path = export_tree(tree, tmp_path / "tree.json")
    assert json.loads(json_path.read_text(encoding="utf-8"))["id"] == "R"
    adjacency_path = export_tree(tree, tmp_path / "adj.json", format="adjacency")
    assert json.loads(adjacency_path.read_text(encoding="utf-8"))["R"] == ["G1"]
    dot = render_dot(tree)
    assert dot.startswith("digraph taxonomy {")
    assert '"G1" -> "SA";' in dot
    with pytest.raises(ValueError):
        export_tree(tree, tmp_path / "tree.xml", format="xml")
