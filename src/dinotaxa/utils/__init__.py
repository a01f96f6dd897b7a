"""Utility helpers shared across dinotaxa modules."""

from .helpers import ensure_directory, genus_of, load_json, serialize_json
from .logging import configure_logging, get_logger, log_timing, logging_context

__all__ = [
    "configure_logging",
    "ensure_directory",
    "genus_of",
    "get_logger",
    "load_json",
    "log_timing",
    "logging_context",
    "serialize_json",
]
