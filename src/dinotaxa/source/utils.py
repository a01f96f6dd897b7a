"""Utility helpers for talking to the external taxonomy source."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any


def _monotonic() -> float:
    return time.monotonic()


@dataclass
class RateLimiter:
    """Thread-safe token-bucket rate limiter shared by concurrent fetches."""

    rate_per_second: float
    burst: int

    _tokens: float = field(default=0.0, init=False)
    _last_check: float = field(default_factory=_monotonic, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        # Seed the bucket to allow an initial burst up to the configured size.
        self._tokens = float(self.burst)
        self._last_check = time.monotonic()

    def _refill(self, now: float) -> None:
        elapsed = max(0.0, now - self._last_check)
        if elapsed == 0:
            return
        if self.rate_per_second > 0:
            self._tokens = min(self.burst, self._tokens + elapsed * self.rate_per_second)
        self._last_check = now

    def _consume_token(self) -> None:
        self._tokens = max(0.0, self._tokens - 1)

    def acquire(self) -> None:
        if self.rate_per_second <= 0:
            return

        # Sleeping while holding the lock serialises waiters in arrival order.
        with self._lock:
            now = time.monotonic()
            self._refill(now)

            if self._tokens < 1:
                tokens_needed = 1 - self._tokens
                sleep_time = tokens_needed / self.rate_per_second
                if sleep_time > 0:
                    time.sleep(sleep_time)
                post_sleep = time.monotonic()
                self._refill(post_sleep)

            self._consume_token()


def to_float(value: Any) -> float | None:
    """Coerce a source value to float, returning None for blanks and junk."""

    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


__all__ = ["RateLimiter", "to_float"]
