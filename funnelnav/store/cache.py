"""
CachedEventStore - caching and rate limiting composed around any EventStore.

Identical queries inside the TTL are answered from cache and never reach
the wrapped store or the rate limiter. Misses spend rate-limit budget;
when it is exhausted the query is refused with RateLimitExceeded.

The cache holds at most `maxsize` results. Expired entries are dropped on
every insert, then the least recently used ones until the bound holds.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Sequence
from datetime import date, datetime
from typing import Any

from funnelnav.store.base import EventStore
from funnelnav.store.exceptions import RateLimitExceeded
from funnelnav.store.ratelimit import RateLimiter

logger = logging.getLogger(__name__)


def _freeze(value: Any) -> Any:
    """Make query arguments usable as a cache key."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(_freeze(v) for v in value)
    return value


class CachedEventStore(EventStore):
    """
    Event store wrapper adding a TTL cache and rate limiting.

    Example:
        store = CachedEventStore(
            BigQueryEventStore(config),
            ttl=300,
            limiter=RateLimiter(per_minute=60, per_hour=1000),
        )
        analytics = ConversionAnalytics(store=store)
    """

    def __init__(
        self,
        store: EventStore,
        ttl: float = 300,
        limiter: RateLimiter | None = None,
        client_id: str = "event_store",
        clock: Callable[[], float] = time.time,
        maxsize: int = 256,
    ):
        """
        Initialize the wrapper.

        Args:
            store: The store to delegate to
            ttl: Seconds a cached result stays fresh (0 disables caching)
            limiter: Optional rate limiter consulted on cache misses
            client_id: Key the limiter counts requests under
            clock: Time source, shared with the limiter in tests
            maxsize: Most results kept at once

        Raises:
            ValueError: If maxsize is not positive
        """
        if maxsize < 1:
            raise ValueError(f"Cache maxsize must be positive, got {maxsize}")
        self.store = store
        self.ttl = ttl
        self.limiter = limiter
        self.client_id = client_id
        self.maxsize = maxsize
        self._clock = clock
        self._cache: OrderedDict[tuple[Any, ...], tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def cache_size(self) -> int:
        """Number of results currently cached, fresh or not yet pruned."""
        with self._lock:
            return len(self._cache)

    def clear(self) -> None:
        """Drop every cached result."""
        with self._lock:
            self._cache.clear()

    def _prune(self, now: float) -> None:
        """Drop expired entries, then the oldest until under maxsize. Caller holds the lock."""
        for key in [k for k, (expires, _) in self._cache.items() if expires <= now]:
            del self._cache[key]
        while len(self._cache) >= self.maxsize:
            self._cache.popitem(last=False)

    def _call(self, method: str, *args: Any) -> Any:
        key = (method, *(_freeze(arg) for arg in args))
        now = self._clock()

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None and now < cached[0]:
                self._cache.move_to_end(key)
                logger.debug(f"Cache hit for {method}")
                return copy.deepcopy(cached[1])

        if self.limiter is not None and not self.limiter.allow(self.client_id):
            raise RateLimitExceeded(self.client_id, self.limiter.retry_after(self.client_id))

        result = getattr(self.store, method)(*args)

        if self.ttl > 0:
            with self._lock:
                self._cache.pop(key, None)
                self._prune(now)
                self._cache[key] = (now + self.ttl, result)
        return copy.deepcopy(result)

    def sum_value(
        self,
        metric_type: str,
        metric_names: str | Sequence[str],
        since: date,
        source_type: str | None = None,
    ) -> float:
        return self._call("sum_value", metric_type, metric_names, since, source_type)

    def group_conversions(self, group_by: str, since: date) -> list[dict[str, Any]]:
        return self._call("group_conversions", group_by, since)

    def earliest_event(
        self,
        metric_type: str,
        customer_id: str,
        at_or_before: datetime,
    ) -> datetime | None:
        return self._call("earliest_event", metric_type, customer_id, at_or_before)

    def conversion_first_touches(self, metric_type: str, since: date) -> list[dict[str, Any]]:
        return self._call("conversion_first_touches", metric_type, since)

    def group_by_customer(self, since: date) -> list[dict[str, Any]]:
        return self._call("group_by_customer", since)

    def campaign_totals(self, since: date) -> list[dict[str, Any]]:
        return self._call("campaign_totals", since)

    def conversion_trend(self, since: date, granularity: str = "day") -> list[dict[str, Any]]:
        return self._call("conversion_trend", since, granularity)

    def conversion_totals(self, start: date, end: date) -> dict[str, float]:
        return self._call("conversion_totals", start, end)

    def distinct_customers(self, metric_type: str, since: date) -> int:
        return self._call("distinct_customers", metric_type, since)

    def daily_totals(
        self,
        metric_type: str,
        metric_names: str | Sequence[str],
        since: date,
    ) -> list[dict[str, Any]]:
        return self._call("daily_totals", metric_type, metric_names, since)
