"""Configuration package exports."""

from .policies import (
    EnrichmentPolicy,
    FilterPolicy,
    LineagePolicy,
    Policies,
    SourcePolicy,
    TreeBuildPolicy,
    load_policies,
)
from .settings import PathsConfig, Settings, get_settings

__all__ = [
    "EnrichmentPolicy",
    "FilterPolicy",
    "LineagePolicy",
    "PathsConfig",
    "Policies",
    "Settings",
    "SourcePolicy",
    "TreeBuildPolicy",
    "get_settings",
    "load_policies",
]
