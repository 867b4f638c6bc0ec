"""Event store abstract class - the query contract the analytics read through."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date, datetime
from enum import Enum
from typing import Any

# Conversions may only be grouped by these columns
GROUPABLE_FIELDS = ("source_type", "gateway")

# Trend granularities
GRANULARITIES = ("day", "week", "month")


def normalize_names(metric_names: str | Enum | Sequence[str | Enum]) -> list[str]:
    """Return metric names as a flat list of plain strings."""
    if isinstance(metric_names, (str, Enum)):
        metric_names = [metric_names]
    return [name.value if isinstance(name, Enum) else str(name) for name in metric_names]


def period_key(moment: date | datetime, granularity: str) -> str:
    """Label the trend period a moment falls into.

    day -> 2025-01-15, week -> 2025-W03 (ISO week), month -> 2025-01.
    Unknown granularities fall back to day.
    """
    day = moment.date() if isinstance(moment, datetime) else moment
    if granularity == "week":
        iso = day.isocalendar()
        return f"{iso.year}-W{iso.week:02d}"
    if granularity == "month":
        return f"{day.year}-{day.month:02d}"
    return day.isoformat()


class EventStore(ABC):
    """Abstract base class for the metric event / conversion store.

    Subclasses answer aggregate queries over two record sets, `metric events`
    and `conversions`. Every method is a read; the store owns its own
    timeouts and consistency, and raises StoreQueryError on failure.

    Row-returning methods yield plain dicts with the keys documented on
    each method, in no guaranteed order.

    Example:
        class SnapshotStore(EventStore):
            def sum_value(self, metric_type, metric_names, since, source_type=None):
                ...
    """

    @abstractmethod
    def sum_value(
        self,
        metric_type: str,
        metric_names: str | Sequence[str],
        since: date,
        source_type: str | None = None,
    ) -> float:
        """Sum `value` over events of a type and name(s) dated on/after `since`.

        Returns 0 when nothing matches.
        """
        pass  # pragma: no cover

    @abstractmethod
    def group_conversions(self, group_by: str, since: date) -> list[dict[str, Any]]:
        """Group conversions dated on/after `since` by a column.

        Returns:
            Rows with key, conversion_count, total_revenue, avg_revenue.
        """
        pass  # pragma: no cover

    @abstractmethod
    def earliest_event(
        self,
        metric_type: str,
        customer_id: str,
        at_or_before: datetime,
    ) -> datetime | None:
        """Return the first `created_at` of a customer's events of a type, or None."""
        pass  # pragma: no cover

    @abstractmethod
    def conversion_first_touches(self, metric_type: str, since: date) -> list[dict[str, Any]]:
        """Pair each customer conversion with that customer's first event.

        Only conversions with a customer_id are returned.

        Returns:
            Rows with customer_id, conversion_date, first_interaction
            (None when the customer has no qualifying event).
        """
        pass  # pragma: no cover

    @abstractmethod
    def group_by_customer(self, since: date) -> list[dict[str, Any]]:
        """Group customer conversions dated on/after `since` by customer.

        Returns:
            Rows with customer_id, total_payments, total_revenue,
            avg_order_value, first_purchase, last_purchase.
        """
        pass  # pragma: no cover

    @abstractmethod
    def campaign_totals(self, since: date) -> list[dict[str, Any]]:
        """Join campaign events and conversions on source_id.

        Returns:
            Rows with campaign_id, messages_sent, clicks, conversions, revenue.
        """
        pass  # pragma: no cover

    @abstractmethod
    def conversion_trend(self, since: date, granularity: str = "day") -> list[dict[str, Any]]:
        """Bucket conversions dated on/after `since` by period.

        Returns:
            Rows with period, conversions, revenue, avg_order_value,
            unique_customers.
        """
        pass  # pragma: no cover

    @abstractmethod
    def conversion_totals(self, start: date, end: date) -> dict[str, float]:
        """Return {"revenue", "conversions"} for conversions dated in [start, end]."""
        pass  # pragma: no cover

    @abstractmethod
    def distinct_customers(self, metric_type: str, since: date) -> int:
        """Count distinct customer_ids among events of a type dated on/after `since`."""
        pass  # pragma: no cover

    @abstractmethod
    def daily_totals(
        self,
        metric_type: str,
        metric_names: str | Sequence[str],
        since: date,
    ) -> list[dict[str, Any]]:
        """Sum `value` per event date for a type and name(s) dated on/after `since`.

        Returns:
            Rows with day (a date) and total, only for days with events.
        """
        pass  # pragma: no cover
