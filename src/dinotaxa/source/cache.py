"""Explicit taxon metadata cache shared by the resolver and the tree builder."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict, Iterable, Iterator

from pydantic import ValidationError

from dinotaxa.entities.core import TaxonRecord
from dinotaxa.utils.helpers import serialize_json
from dinotaxa.utils.logging import get_logger


class TaxonCache:
    """Thread-safe ``id -> TaxonRecord`` store with optional JSON persistence."""

    def __init__(self, records: Iterable[TaxonRecord] = ()) -> None:
        self._lock = threading.RLock()
        self._records: Dict[str, TaxonRecord] = {}
        self._stats = {"hits": 0, "misses": 0, "stored": 0}
        self._logger = get_logger(component="taxon_cache")
        for record in records:
            self.put(record)

    def __contains__(self, taxon_id: str) -> bool:
        with self._lock:
            return taxon_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[TaxonRecord]:
        return iter(self.records())

    def get(self, taxon_id: str) -> TaxonRecord | None:
        with self._lock:
            record = self._records.get(taxon_id)
            if record is None:
                self._stats["misses"] += 1
            else:
                self._stats["hits"] += 1
            return record

    def put(self, record: TaxonRecord) -> None:
        with self._lock:
            self._records[record.id] = record
            self._stats["stored"] += 1

    def find_by_name(self, name: str) -> TaxonRecord | None:
        with self._lock:
            for record in self._records.values():
                if record.name == name:
                    return record
        return None

    def records(self) -> list[TaxonRecord]:
        """Return cached records ordered by id for deterministic output."""

        with self._lock:
            return [self._records[key] for key in sorted(self._records)]

    def snapshot(self) -> Dict[str, TaxonRecord]:
        with self._lock:
            return dict(self._records)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._stats, size=len(self._records))

    @classmethod
    def load(cls, path: Path | str) -> "TaxonCache":
        """Load a cache written by :meth:`save`; a missing file yields an empty cache."""

        cache = cls()
        source = Path(path)
        if not source.exists():
            return cache
        try:
            payload = json.loads(source.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            cache._logger.warning("Taxon cache file corrupted; starting fresh", path=str(source))
            return cache
        for entry in payload.get("taxa", []):
            try:
                cache.put(TaxonRecord.model_validate(entry))
            except ValidationError:
                cache._logger.warning("Dropping invalid cached taxon", entry=entry)
        cache._logger.info("Loaded taxon cache", path=str(source), size=len(cache))
        return cache

    def save(self, path: Path | str) -> Path:
        payload = {"taxa": [record.model_dump(mode="json") for record in self.records()]}
        return serialize_json(payload, path)


__all__ = ["TaxonCache"]
