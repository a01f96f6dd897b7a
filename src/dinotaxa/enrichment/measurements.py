"""Name-keyed body measurement lookup loaded from a prepared JSON file."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, Tuple

from pydantic import ValidationError

from dinotaxa.config.policies import EnrichmentPolicy
from dinotaxa.entities.core import Measurement
from dinotaxa.utils.helpers import load_json
from dinotaxa.utils.logging import get_logger

_LOGGER = get_logger(module=__name__)

_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d+(?:\.\d+)?)")


def parse_measurement(value: str | None, missing_marker: str = "N/A") -> float | None:
    """Return the leading number of ``"12.00 m"`` or ``"1500.00 - 2000.00 kg"``.

    Absent values, the missing marker and strings without a leading number
    all mean "no measurement".
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text or text == missing_marker:
        return None
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return None
    return float(match.group(1))


class MeasurementIndex:
    """Lookup from species name to parsed ``(length, weight)``."""

    def __init__(
        self,
        measurements: Iterable[Measurement] = (),
        *,
        policy: EnrichmentPolicy | None = None,
    ) -> None:
        self.policy = policy or EnrichmentPolicy()
        self._by_name: Dict[str, Measurement] = {}
        for measurement in measurements:
            self._by_name.setdefault(measurement.name, measurement)

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Measurement | None:
        return self._by_name.get(name)

    def lookup(self, name: str) -> Tuple[float | None, float | None]:
        measurement = self._by_name.get(name)
        if measurement is None:
            return None, None
        marker = self.policy.missing_marker
        return (
            parse_measurement(measurement.length, marker),
            parse_measurement(measurement.weight, marker),
        )

    @classmethod
    def load(cls, path: Path | str, *, policy: EnrichmentPolicy | None = None) -> "MeasurementIndex":
        payload = load_json(path)
        if not isinstance(payload, list):
            raise ValueError(f"measurement file must contain a JSON list: {path}")
        entries = []
        for raw in payload:
            try:
                entries.append(Measurement.model_validate(raw))
            except ValidationError:
                _LOGGER.warning("Skipping invalid measurement entry", entry=raw)
        index = cls(entries, policy=policy)
        _LOGGER.info("Loaded measurements", path=str(path), count=len(index))
        return index

    @classmethod
    def from_policy(cls, policy: EnrichmentPolicy) -> "MeasurementIndex":
        """Load ``policy.measurements_file`` when configured, else an empty index."""

        if not policy.measurements_file:
            return cls(policy=policy)
        return cls.load(policy.measurements_file, policy=policy)


__all__ = ["MeasurementIndex", "parse_measurement"]
