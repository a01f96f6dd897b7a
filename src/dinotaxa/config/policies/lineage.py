"""Lineage resolution policy models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LineagePolicy(BaseModel):
    """Bounds for walking parent links up to the domain root."""

    root_name: str = Field(default="Dinosauria", min_length=1)
    max_depth: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Maximum number of point lookups for a single lineage.",
    )
