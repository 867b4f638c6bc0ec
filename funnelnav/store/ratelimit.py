"""Fixed-window rate limiter with an injectable clock."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateWindow:
    """A request budget over a fixed window of seconds."""

    name: str
    seconds: int
    limit: int


MINUTE = 60
HOUR = 3600


class RateLimiter:
    """
    Count requests per key in fixed time windows.

    A window's counter is keyed by (key, window name, bucket) where
    bucket = int(now // window seconds), so counters reset on bucket
    boundaries rather than sliding. Stale buckets are dropped as new
    ones are opened.

    Example:
        limiter = RateLimiter(per_minute=240, per_hour=10_000)
        if limiter.allow("bigquery"):
            run_query()
    """

    def __init__(
        self,
        per_minute: int = 240,
        per_hour: int = 10_000,
        clock: Callable[[], float] = time.time,
    ):
        self.windows = (
            RateWindow("minute", MINUTE, per_minute),
            RateWindow("hour", HOUR, per_hour),
        )
        self._clock = clock
        self._counters: dict[tuple[str, str], tuple[int, int]] = {}
        self._lock = threading.Lock()

    def _bucket(self, window: RateWindow, now: float) -> int:
        return int(now // window.seconds)

    def _used(self, key: str, window: RateWindow, now: float) -> int:
        bucket, count = self._counters.get((key, window.name), (None, 0))
        return count if bucket == self._bucket(window, now) else 0

    def allow(self, key: str) -> bool:
        """Record a request for `key` if every window has budget left.

        Returns:
            True if the request was recorded, False if any window is full.
        """
        with self._lock:
            now = self._clock()
            for window in self.windows:
                if self._used(key, window, now) >= window.limit:
                    logger.warning(f"Rate limit reached for {key} ({window.name})")
                    return False
            for window in self.windows:
                used = self._used(key, window, now)
                self._counters[(key, window.name)] = (self._bucket(window, now), used + 1)
            return True

    def remaining(self, key: str) -> dict[str, int]:
        """Return the remaining budget per window for `key`."""
        with self._lock:
            now = self._clock()
            return {
                window.name: max(0, window.limit - self._used(key, window, now))
                for window in self.windows
            }

    def retry_after(self, key: str) -> float:
        """Seconds until every exhausted window for `key` resets (0 if none)."""
        with self._lock:
            now = self._clock()
            waits = [
                (self._bucket(window, now) + 1) * window.seconds - now
                for window in self.windows
                if self._used(key, window, now) >= window.limit
            ]
            return max(waits, default=0.0)

    def reset(self, key: str | None = None) -> None:
        """Clear counters for one key, or for every key."""
        with self._lock:
            if key is None:
                self._counters.clear()
                return
            for window in self.windows:
                self._counters.pop((key, window.name), None)
