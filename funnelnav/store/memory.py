"""
InMemoryEventStore - EventStore over records held in process.

Useful for offline analysis of exported data and for tests. Accepts
MetricEvent / Conversion objects, plain dicts, or pandas DataFrames
whose columns follow the storage schema.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime
from typing import Any, TypeVar

import pandas as pd

from funnelnav.conversions.schema import Conversion, MetricEvent, MetricType
from funnelnav.store.base import GROUPABLE_FIELDS, EventStore, normalize_names, period_key
from funnelnav.store.exceptions import StoreQueryError

logger = logging.getLogger(__name__)

T = TypeVar("T", MetricEvent, Conversion)

RecordSource = pd.DataFrame | Iterable[Any] | None


def _to_records(
    data: RecordSource,
    record_type: type[T],
    factory: Callable[[dict[str, Any]], T],
) -> list[T]:
    """Convert a DataFrame or iterable of dicts/records to record objects."""
    if data is None:
        return []
    if isinstance(data, pd.DataFrame):
        # NaN -> None so optional fields stay optional
        data = data.astype(object).where(pd.notna(data), None).to_dict("records")
    return [item if isinstance(item, record_type) else factory(dict(item)) for item in data]


class InMemoryEventStore(EventStore):
    """
    Event store backed by in-process lists.

    Example:
        store = InMemoryEventStore(
            events=[MetricEvent("whatsapp", "message_sent", date(2025, 1, 15))],
            conversions=pd.read_csv("conversions.csv"),
        )
        store.sum_value("whatsapp", "message_sent", since=date(2025, 1, 1))
    """

    def __init__(
        self,
        events: RecordSource = None,
        conversions: RecordSource = None,
    ):
        """
        Initialize the store.

        Args:
            events: Metric events as objects, dicts or a DataFrame
            conversions: Conversions as objects, dicts or a DataFrame

        Raises:
            ValueError: If a record is invalid or a payment_id repeats
        """
        self._events: list[MetricEvent] = _to_records(events, MetricEvent, MetricEvent.from_dict)
        self._conversions: list[Conversion] = []
        self._payment_ids: set[str] = set()
        for conversion in _to_records(conversions, Conversion, Conversion.from_dict):
            self.add_conversion(conversion)

    @property
    def events(self) -> tuple[MetricEvent, ...]:
        return tuple(self._events)

    @property
    def conversions(self) -> tuple[Conversion, ...]:
        return tuple(self._conversions)

    def add_event(self, event: MetricEvent) -> None:
        """Append an event to the log."""
        self._events.append(event)

    def add_conversion(self, conversion: Conversion) -> None:
        """Append a conversion, enforcing one conversion per payment."""
        if conversion.payment_id in self._payment_ids:
            raise ValueError(f"Duplicate payment_id: {conversion.payment_id}")
        self._payment_ids.add(conversion.payment_id)
        self._conversions.append(conversion)

    def _conversions_since(self, since: date) -> list[Conversion]:
        return [c for c in self._conversions if c.conversion_date.date() >= since]

    def sum_value(
        self,
        metric_type: str,
        metric_names: str | Sequence[str],
        since: date,
        source_type: str | None = None,
    ) -> float:
        names = set(normalize_names(metric_names))
        metric_type = normalize_names(metric_type)[0]
        return float(
            sum(
                event.value
                for event in self._events
                if event.metric_type == metric_type
                and event.metric_name in names
                and event.date >= since
                and (not source_type or event.source_type == source_type)
            )
        )

    def group_conversions(self, group_by: str, since: date) -> list[dict[str, Any]]:
        if group_by not in GROUPABLE_FIELDS:
            raise StoreQueryError(f"Cannot group conversions by: {group_by}")

        groups: dict[Any, list[float]] = defaultdict(list)
        for conversion in self._conversions_since(since):
            groups[getattr(conversion, group_by)].append(conversion.value)

        return [
            {
                "key": key,
                "conversion_count": len(values),
                "total_revenue": sum(values),
                "avg_revenue": sum(values) / len(values),
            }
            for key, values in groups.items()
        ]

    def earliest_event(
        self,
        metric_type: str,
        customer_id: str,
        at_or_before: datetime,
    ) -> datetime | None:
        metric_type = normalize_names(metric_type)[0]
        candidates = [
            event.created_at
            for event in self._events
            if event.metric_type == metric_type
            and event.customer_id == customer_id
            and event.created_at <= at_or_before
        ]
        return min(candidates) if candidates else None

    def conversion_first_touches(self, metric_type: str, since: date) -> list[dict[str, Any]]:
        return [
            {
                "customer_id": conversion.customer_id,
                "conversion_date": conversion.conversion_date,
                "first_interaction": self.earliest_event(
                    metric_type, conversion.customer_id, conversion.conversion_date
                ),
            }
            for conversion in self._conversions_since(since)
            if conversion.customer_id is not None
        ]

    def group_by_customer(self, since: date) -> list[dict[str, Any]]:
        groups: dict[str, list[Conversion]] = defaultdict(list)
        for conversion in self._conversions_since(since):
            if conversion.customer_id is not None:
                groups[conversion.customer_id].append(conversion)

        rows = []
        for customer_id, purchases in groups.items():
            dates = [c.conversion_date for c in purchases]
            revenue = sum(c.value for c in purchases)
            rows.append({
                "customer_id": customer_id,
                "total_payments": len(purchases),
                "total_revenue": revenue,
                "avg_order_value": revenue / len(purchases),
                "first_purchase": min(dates),
                "last_purchase": max(dates),
            })
        return rows

    def campaign_totals(self, since: date) -> list[dict[str, Any]]:
        totals: dict[str, dict[str, float]] = {}
        for event in self._events:
            if (
                event.metric_type != MetricType.CAMPAIGN.value
                or event.source_id is None
                or event.date < since
            ):
                continue
            row = totals.setdefault(event.source_id, {"messages_sent": 0.0, "clicks": 0.0})
            if event.metric_name == "sent":
                row["messages_sent"] += event.value
            elif event.metric_name == "click":
                row["clicks"] += event.value

        revenue: dict[str, list[float]] = defaultdict(list)
        for conversion in self._conversions_since(since):
            if conversion.source_id in totals:
                revenue[conversion.source_id].append(conversion.value)

        return [
            {
                "campaign_id": campaign_id,
                "messages_sent": row["messages_sent"],
                "clicks": row["clicks"],
                "conversions": len(revenue[campaign_id]),
                "revenue": sum(revenue[campaign_id]),
            }
            for campaign_id, row in totals.items()
        ]

    def conversion_trend(self, since: date, granularity: str = "day") -> list[dict[str, Any]]:
        periods: dict[str, list[Conversion]] = defaultdict(list)
        for conversion in self._conversions_since(since):
            periods[period_key(conversion.conversion_date, granularity)].append(conversion)

        rows = []
        for period, bucket in periods.items():
            revenue = sum(c.value for c in bucket)
            rows.append({
                "period": period,
                "conversions": len(bucket),
                "revenue": revenue,
                "avg_order_value": revenue / len(bucket),
                "unique_customers": len({c.customer_id for c in bucket if c.customer_id is not None}),
            })
        return rows

    def conversion_totals(self, start: date, end: date) -> dict[str, float]:
        window = [c for c in self._conversions if start <= c.conversion_date.date() <= end]
        return {
            "revenue": float(sum(c.value for c in window)),
            "conversions": len(window),
        }

    def distinct_customers(self, metric_type: str, since: date) -> int:
        metric_type = normalize_names(metric_type)[0]
        return len({
            event.customer_id
            for event in self._events
            if event.metric_type == metric_type
            and event.date >= since
            and event.customer_id is not None
        })

    def daily_totals(
        self,
        metric_type: str,
        metric_names: str | Sequence[str],
        since: date,
    ) -> list[dict[str, Any]]:
        names = set(normalize_names(metric_names))
        metric_type = normalize_names(metric_type)[0]
        totals: dict[date, float] = defaultdict(float)
        for event in self._events:
            if event.metric_type == metric_type and event.metric_name in names and event.date >= since:
                totals[event.date] += event.value
        return [{"day": day, "total": total} for day, total in totals.items()]
