"""Custom exceptions for event store access."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for event store errors."""

    pass


class StoreQueryError(StoreError):
    """Raised when a query against the event store fails."""

    pass


class RateLimitExceeded(StoreError):
    """Raised when a store query is refused by the rate limiter."""

    def __init__(self, key: str, retry_after: float):
        super().__init__(f"Rate limit exceeded for {key}, retry in {retry_after:.0f}s")
        self.key = key
        self.retry_after = retry_after
