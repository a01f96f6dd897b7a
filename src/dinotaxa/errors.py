"""Error hierarchy for the dinosaur taxonomy ingestion pipeline."""

from __future__ import annotations

from typing import Sequence


class DinoTaxaError(Exception):
    """Base class for dinotaxa exceptions."""


class SourceUnavailable(DinoTaxaError):
    """Raised when a call to the external taxonomy source fails."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class LineageTooDeep(DinoTaxaError):
    """Raised when an ancestor walk exceeds its depth bound or revisits a taxon."""

    def __init__(self, species_id: str, max_depth: int, partial: Sequence[str] = ()) -> None:
        super().__init__(
            f"lineage for taxon '{species_id}' exceeded max_depth={max_depth} "
            f"(walked {len(partial)} taxa)"
        )
        self.species_id = species_id
        self.max_depth = max_depth
        self.partial = list(partial)


class InconsistentParentage(DinoTaxaError):
    """Raised when a taxon is observed under two different parents."""

    def __init__(self, taxon_id: str, existing_parent: str | None, new_parent: str | None) -> None:
        super().__init__(
            f"taxon '{taxon_id}' already placed under '{existing_parent}', "
            f"lineage places it under '{new_parent}'"
        )
        self.taxon_id = taxon_id
        self.existing_parent = existing_parent
        self.new_parent = new_parent


class RootNotFound(DinoTaxaError):
    """Raised when the designated root taxon is missing from the taxon set."""

    def __init__(self, root_name: str) -> None:
        super().__init__(f"root taxon '{root_name}' not found in taxon info")
        self.root_name = root_name


__all__ = [
    "DinoTaxaError",
    "SourceUnavailable",
    "LineageTooDeep",
    "InconsistentParentage",
    "RootNotFound",
]
