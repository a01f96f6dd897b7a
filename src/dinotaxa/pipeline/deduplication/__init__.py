"""Public API for candidate deduplication."""

from __future__ import annotations

from .processor import DeduplicationResult, Deduplicator, deduplicate

__all__ = ["DeduplicationResult", "Deduplicator", "deduplicate"]
