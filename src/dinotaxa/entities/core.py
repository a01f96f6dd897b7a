"""Core domain entities used throughout the ingestion pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TAXON_ID_PREFIX = "txn:"

# Paleobiology Database numeric rank codes; lower is more specific.
RANK_CODES: Dict[str, int] = {
    "subspecies": 2,
    "species": 3,
    "subgenus": 4,
    "genus": 5,
    "subtribe": 6,
    "tribe": 7,
    "subfamily": 8,
    "family": 9,
    "superfamily": 10,
    "infraorder": 11,
    "suborder": 12,
    "order": 13,
    "superorder": 14,
    "infraclass": 15,
    "subclass": 16,
    "class": 17,
    "superclass": 18,
    "subphylum": 19,
    "phylum": 20,
    "superphylum": 21,
    "subkingdom": 22,
    "kingdom": 23,
    "unranked clade": 25,
    "informal": 26,
}
SPECIES_RANK = RANK_CODES["species"]


def normalize_taxon_id(value: Any) -> str | None:
    """Return the bare identifier for ``txn:123``, ``123`` or ``"123"`` inputs."""

    if value is None:
        return None
    text = str(value).strip()
    if text.startswith(TAXON_ID_PREFIX):
        text = text[len(TAXON_ID_PREFIX) :]
    if not text or text == "0":
        return None
    return text


def rank_code(value: Any) -> int:
    """Map a rank label or numeric rank to its integer code (0 when unknown)."""

    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if text in RANK_CODES:
        return RANK_CODES[text]
    try:
        return int(float(text))
    except ValueError:
        return 0


class TaxonRecord(BaseModel):
    """A single taxon as returned by a point lookup."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    rank: int = Field(default=0, ge=0)
    parent_id: str | None = Field(default=None)
    attribution: str | None = Field(default=None)
    first_appearance_ma: float | None = Field(default=None)
    last_appearance_ma: float | None = Field(default=None)

    @field_validator("id", mode="before")
    @classmethod
    def _normalize_id(cls, value: Any) -> str:
        normalized = normalize_taxon_id(value)
        if normalized is None:
            raise ValueError("taxon id must be a non-empty identifier")
        return normalized

    @field_validator("parent_id", mode="before")
    @classmethod
    def _normalize_parent(cls, value: Any) -> str | None:
        return normalize_taxon_id(value)

    @field_validator("rank", mode="before")
    @classmethod
    def _coerce_rank(cls, value: Any) -> int:
        return rank_code(value)

    @model_validator(mode="after")
    def _reject_self_parent(self) -> "TaxonRecord":
        if self.parent_id == self.id:
            raise ValueError(f"taxon '{self.id}' cannot be its own parent")
        return self

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class CandidateSpecies(BaseModel):
    """Raw species record fetched for a higher-taxon group, before filtering."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Scientific name as returned by the source")
    rank: str = Field(default="species", description="Rank label, e.g. 'species'")
    parent: str = Field(default="", description="Name of the immediate parent taxon")
    group: str = Field(..., min_length=1, description="Higher-taxon label used for the fetch")
    family: str | None = Field(default=None)
    first_appearance_ma: float | None = Field(
        default=None,
        description="Earliest possible first appearance, millions of years ago.",
    )
    last_appearance_ma: float | None = Field(
        default=None,
        description="Latest possible last appearance, millions of years ago.",
    )
    accepted_name: str | None = Field(default=None)
    attribution: str | None = Field(default=None)

    @field_validator("parent", mode="before")
    @classmethod
    def _default_parent(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def genus(self) -> str:
        return self.name.split(" ")[0]


# Surviving candidates keep the exact same shape.
AcceptedSpecies = CandidateSpecies


class LineageTermination(str, Enum):
    """Why an ancestor walk stopped."""

    ROOT = "root"
    MISSING = "missing"
    UNAVAILABLE = "unavailable"
    ORPHAN = "orphan"


class Lineage(BaseModel):
    """Ordered chain of taxon ids from the domain root down to a species."""

    species_id: str = Field(..., min_length=1)
    taxon_ids: List[str] = Field(default_factory=list)
    terminated_by: LineageTermination = Field(default=LineageTermination.ROOT)

    @property
    def complete(self) -> bool:
        return (
            self.terminated_by is LineageTermination.ROOT
            and bool(self.taxon_ids)
            and self.taxon_ids[-1] == self.species_id
        )

    @property
    def root_id(self) -> str | None:
        return self.taxon_ids[0] if self.taxon_ids else None

    def __len__(self) -> int:
        return len(self.taxon_ids)


class Measurement(BaseModel):
    """Optional length/weight strings supplied by the enrichment collaborator."""

    name: str = Field(..., min_length=1)
    length: str | None = Field(default=None)
    weight: str | None = Field(default=None)
    source: str | None = Field(default=None)


class SpeciesEntry(BaseModel):
    """Flat species row handed to persistence and the UI, keyed by species id."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    taxon_id: str = Field(..., min_length=1)
    lineage: List[str] = Field(default_factory=list)
    group: str = Field(..., min_length=1)
    family: str | None = Field(default=None)
    description: str = Field(default="")
    time_range: str = Field(default="")
    first_appearance: float | None = Field(default=None)
    last_appearance: float | None = Field(default=None)
    length: float | None = Field(default=None)
    weight: float | None = Field(default=None)


class RunSummary(BaseModel):
    """Aggregate outcome of one pipeline run."""

    run_id: str = Field(..., min_length=1)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = Field(default=None)
    groups_requested: int = Field(default=0, ge=0)
    groups_failed: List[str] = Field(default_factory=list)
    candidates_fetched: int = Field(default=0, ge=0)
    candidates_filtered: int = Field(default=0, ge=0)
    duplicates_dropped: int = Field(default=0, ge=0)
    processed: int = Field(default=0, ge=0)
    succeeded: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    failure_reasons: Dict[str, int] = Field(default_factory=dict)
    failed_units: List[Dict[str, str]] = Field(default_factory=list)
    filter_reasons: Dict[str, int] = Field(default_factory=dict)
    tree_built: bool = Field(default=False)
    tree_stats: Dict[str, Any] = Field(default_factory=dict)

    def record_failure(self, unit: str, reason: str, detail: str = "") -> None:
        self.failed += 1
        self.failure_reasons[reason] = self.failure_reasons.get(reason, 0) + 1
        entry = {"unit": unit, "reason": reason}
        if detail:
            entry["detail"] = detail
        self.failed_units.append(entry)

    def record_success(self) -> None:
        self.succeeded += 1


__all__ = [
    "AcceptedSpecies",
    "CandidateSpecies",
    "Lineage",
    "LineageTermination",
    "Measurement",
    "RANK_CODES",
    "RunSummary",
    "SPECIES_RANK",
    "SpeciesEntry",
    "TAXON_ID_PREFIX",
    "TaxonRecord",
    "normalize_taxon_id",
    "rank_code",
]
