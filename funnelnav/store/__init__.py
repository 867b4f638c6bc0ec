"""
FunnelNav Store - Event store contract and implementations.

Usage:
    from funnelnav.store import BigQueryEventStore, CachedEventStore, RateLimiter

    # Query BigQuery through a cache and a rate limiter
    store = CachedEventStore(
        BigQueryEventStore(),
        ttl=300,
        limiter=RateLimiter(per_minute=240, per_hour=10_000),
    )

    # Or analyze exported data in process
    store = InMemoryEventStore(events=events_df, conversions=conversions_df)
"""

from funnelnav.store.base import EventStore
from funnelnav.store.bigquery import BigQueryEventStore, QueryResult, StoreConfig
from funnelnav.store.cache import CachedEventStore
from funnelnav.store.exceptions import RateLimitExceeded, StoreError, StoreQueryError
from funnelnav.store.memory import InMemoryEventStore
from funnelnav.store.ratelimit import RateLimiter
from funnelnav.store.validation import QueryValidator

__all__ = [
    "EventStore",
    "BigQueryEventStore",
    "InMemoryEventStore",
    "CachedEventStore",
    "StoreConfig",
    "QueryResult",
    "RateLimiter",
    "QueryValidator",
    "StoreError",
    "StoreQueryError",
    "RateLimitExceeded",
]
