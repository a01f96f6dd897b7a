"""Policy configuration primitives for the ingestion pipeline."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, model_validator

from .enrichment import EnrichmentPolicy
from .filtering import (
    DEFAULT_ICHNO_SUFFIXES,
    DEFAULT_ICHNOGENERA,
    DEFAULT_MODERN_BIRD_FAMILIES,
    FilterPolicy,
)
from .hierarchy import TreeBuildPolicy
from .lineage import LineagePolicy
from .source import DEFAULT_GROUPS, RateLimitSettings, SourcePolicy


class Policies(BaseModel):
    """Root policy container."""

    policy_version: str = Field(default="2024-10-01")
    source: SourcePolicy = Field(default_factory=SourcePolicy)
    filtering: FilterPolicy = Field(default_factory=FilterPolicy)
    lineage: LineagePolicy = Field(default_factory=LineagePolicy)
    hierarchy: TreeBuildPolicy = Field(default_factory=TreeBuildPolicy)
    enrichment: EnrichmentPolicy = Field(default_factory=EnrichmentPolicy)

    @model_validator(mode="after")
    def _validate_root_names(self) -> "Policies":
        if not self.policy_version:
            raise ValueError("policy_version must be provided")
        if self.lineage.root_name != self.hierarchy.root_name:
            raise ValueError(
                "lineage.root_name and hierarchy.root_name must match "
                f"('{self.lineage.root_name}' != '{self.hierarchy.root_name}')"
            )
        return self


def _resolve_env_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides using DINOTAXA_POLICY__ prefix."""

    prefix = "DINOTAXA_POLICY__"
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        path = key[len(prefix) :].lower().split("__")
        cursor = raw
        for part in path[:-1]:
            cursor = cursor.setdefault(part, {})
        try:
            parsed = json.loads(value)
        except (TypeError, json.JSONDecodeError):
            parsed = value
        cursor[path[-1]] = parsed
    return raw


def load_policies(source: Path | Dict[str, Any] | None = None) -> Policies:
    """Load policies from a dictionary or YAML file with environment overrides."""

    if source is None:
        raw: Dict[str, Any] = {}
    elif isinstance(source, Path):
        if not source.exists():
            raise FileNotFoundError(f"Policy file not found: {source}")
        with source.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    else:
        raw = dict(source)
    hydrated = _resolve_env_overrides(raw)
    return Policies.model_validate(hydrated)


__all__ = [
    "DEFAULT_GROUPS",
    "DEFAULT_ICHNOGENERA",
    "DEFAULT_ICHNO_SUFFIXES",
    "DEFAULT_MODERN_BIRD_FAMILIES",
    "EnrichmentPolicy",
    "FilterPolicy",
    "LineagePolicy",
    "Policies",
    "RateLimitSettings",
    "SourcePolicy",
    "TreeBuildPolicy",
    "load_policies",
]
