"""Shared fixtures: an in-memory Paleobiology Database behind a fake ``http_get``."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import pytest

from dinotaxa.config.policies import RateLimitSettings, SourcePolicy
from dinotaxa.source import SourceClient
from dinotaxa.source.utils import RateLimiter


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, *, broken: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._broken = broken

    def json(self) -> Any:
        if self._broken:
            raise ValueError("not json")
        return self._payload


class FakePbdb:
    """Routes list and single queries to canned records and records every call."""

    def __init__(
        self,
        taxa: Mapping[str, Mapping[str, Any]] | None = None,
        groups: Mapping[str, List[Mapping[str, Any]]] | None = None,
    ) -> None:
        self.taxa: Dict[str, Mapping[str, Any]] = dict(taxa or {})
        self.groups: Dict[str, List[Mapping[str, Any]]] = {k: list(v) for k, v in (groups or {}).items()}
        self.failing_groups: set[str] = set()
        self.failing_ids: set[str] = set()
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, url: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> FakeResponse:
        params = dict(params or {})
        self.calls.append({"url": url, "params": params, **kwargs})
        if url.endswith("taxa/single.json"):
            taxon_id = str(params["id"])
            if taxon_id in self.failing_ids:
                return FakeResponse(503, {})
            record = self.taxa.get(taxon_id)
            return FakeResponse(200, {"records": [record] if record else []})
        if "base_name" in params:
            group = params["base_name"]
            if group in self.failing_groups:
                return FakeResponse(500, {})
            return FakeResponse(200, {"records": self.groups.get(group, [])})
        if "name" in params:
            matches = [
                record
                for record in self.taxa.values()
                if record["nam"] == params["name"] and record.get("rnk") == 3
            ]
            return FakeResponse(200, {"records": matches[:1]})
        return FakeResponse(404, {})

    def single_lookups(self) -> List[str]:
        return [str(call["params"]["id"]) for call in self.calls if call["url"].endswith("single.json")]


def taxon(taxon_id: int, name: str, rank: int, parent: int | None) -> Dict[str, Any]:
    record: Dict[str, Any] = {"oid": f"txn:{taxon_id}", "nam": name, "rnk": rank}
    if parent is not None:
        record["par"] = f"txn:{parent}"
    return record


def species_row(name: str, family: str | None = None, first: float | None = None, last: float | None = None, parent: str = "") -> Dict[str, Any]:
    row: Dict[str, Any] = {"taxon_name": name, "taxon_rank": "species", "parent_name": parent}
    if family is not None:
        row["family"] = family
    if first is not None:
        row["firstapp_max_ma"] = first
    if last is not None:
        row["lastapp_min_ma"] = last
    return row


@pytest.fixture
def dino_taxa() -> Dict[str, Dict[str, Any]]:
    rows = [
        taxon(1, "Dinosauria", 25, None),
        taxon(2, "Theropoda", 25, 1),
        taxon(3, "Tyrannosauridae", 9, 2),
        taxon(4, "Tyrannosaurus", 5, 3),
        taxon(5, "Tyrannosaurus rex", 3, 4),
        taxon(6, "Allosaurus", 5, 2),
        taxon(7, "Allosaurus fragilis", 3, 6),
        taxon(8, "Ornithischia", 25, 1),
        taxon(9, "Triceratops", 5, 8),
        taxon(10, "Triceratops horridus", 3, 9),
    ]
    return {row["oid"].split(":")[1]: row for row in rows}


@pytest.fixture
def dino_groups() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "Theropoda": [
            species_row("Tyrannosaurus rex", "Tyrannosauridae", 68.0, 66.0, parent="Tyrannosaurus"),
            species_row("Grallator parallelus", None, 201.3, 190.8, parent="Grallator"),
            species_row("Allosaurus fragilis", "Allosauridae", 155.7, 145.5, parent="Allosaurus"),
        ],
        "Ornithischia": [
            species_row("Triceratops horridus", "Ceratopsidae", 68.0, 66.0, parent="Triceratops"),
            species_row("Spheroolithus irenensis", None, 84.0, 72.0, parent="Spheroolithus"),
        ],
        "Saurischia": [
            species_row("Tyrannosaurus rex", "Tyrannosauridae", 68.0, 66.0, parent="Tyrannosaurus"),
        ],
    }


@pytest.fixture
def fake_pbdb(dino_taxa, dino_groups) -> FakePbdb:
    return FakePbdb(dino_taxa, dino_groups)


@pytest.fixture
def source_policy() -> SourcePolicy:
    return SourcePolicy(
        groups=["Theropoda", "Ornithischia", "Saurischia"],
        max_workers=2,
        rate_limit=RateLimitSettings(requests_per_second=0),
    )


@pytest.fixture
def source_client(source_policy: SourcePolicy, fake_pbdb: FakePbdb) -> SourceClient:
    limiter = RateLimiter(rate_per_second=0, burst=1)
    return SourceClient(source_policy, rate_limiter=limiter, http_get=fake_pbdb)
