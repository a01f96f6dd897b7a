"""Optional enrichment data joined onto persisted species rows."""

from __future__ import annotations

from .measurements import MeasurementIndex, parse_measurement

__all__ = ["MeasurementIndex", "parse_measurement"]
