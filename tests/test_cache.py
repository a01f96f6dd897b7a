"""Tests for the taxon cache."""

from __future__ import annotations

import json

from dinotaxa.entities.core import TaxonRecord
from dinotaxa.source import TaxonCache


def test_get_put_and_stats() -> None:
    cache = TaxonCache()
    assert cache.get("1") is None
    cache.put(TaxonRecord(id="txn:1", name="Dinosauria", rank=25))

    record = cache.get("1")
    assert record is not None and record.name == "Dinosauria"
    assert "1" in cache
    assert cache.find_by_name("Dinosauria") is record
    assert cache.stats() == {"hits": 1, "misses": 1, "stored": 1, "size": 1}


def test_save_and_load_round_trip_sorted(tmp_path) -> None:
    cache = TaxonCache(
        [
            TaxonRecord(id="2", name="Theropoda", rank=25, parent_id="1"),
            TaxonRecord(id="1", name="Dinosauria", rank=25),
        ]
    )
    path = cache.save(tmp_path / "taxa.json")

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert [row["id"] for row in payload["taxa"]] == ["1", "2"]

    loaded = TaxonCache.load(path)
    assert len(loaded) == 2
    assert loaded.get("2").parent_id == "1"


def test_load_missing_or_corrupt_file(tmp_path) -> None:
    assert len(TaxonCache.load(tmp_path / "absent.json")) == 0
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert len(TaxonCache.load(corrupt)) == 0
