"""Taxonomy tree assembly policy models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class TreeBuildPolicy(BaseModel):
    """Configuration controlling how lineages merge into one rooted tree."""

    root_name: str = Field(default="Dinosauria", min_length=1)
    parentage_policy: Literal["strict", "permissive"] = Field(
        default="strict",
        description=(
            "strict rejects a lineage that places an existing taxon under a new parent; "
            "permissive places the taxon again and records a warning."
        ),
    )
    placeholder_name: str = Field(default="Unknown", min_length=1)
    placeholder_rank: int = Field(default=0, ge=0)
    max_tree_size: int = Field(default=100_000, ge=1)
