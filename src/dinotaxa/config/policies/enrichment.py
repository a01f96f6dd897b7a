"""Measurement enrichment policy models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class EnrichmentPolicy(BaseModel):
    """Location of the name-keyed measurement file produced upstream."""

    measurements_file: str | None = Field(
        default=None,
        description="JSON list of {name, length, weight, source} entries; optional.",
    )
    missing_marker: str = Field(default="N/A", min_length=1)
