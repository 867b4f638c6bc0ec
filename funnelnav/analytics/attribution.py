"""
Attribution - conversion revenue by source type and by gateway.

The two groupings are independent views of the same conversions, so each
one's revenue adds up to the total for the period.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from funnelnav.analytics.reports import AttributionReport, AttributionRow
from funnelnav.store.base import EventStore


def to_rows(groups: Iterable[dict[str, Any]]) -> list[AttributionRow]:
    """Convert store group rows to AttributionRows, highest revenue first."""
    rows = [
        AttributionRow(
            key=group["key"],
            conversion_count=int(group["conversion_count"] or 0),
            total_revenue=float(group["total_revenue"] or 0),
            avg_revenue=float(group["avg_revenue"] or 0),
        )
        for group in groups
    ]
    rows.sort(key=lambda row: row.total_revenue, reverse=True)
    return rows


def compute_attribution(store: EventStore, cutoff: date) -> AttributionReport:
    """Group conversions on or after the cutoff by source and by gateway."""
    return AttributionReport(
        by_source=to_rows(store.group_conversions("source_type", cutoff)),
        by_gateway=to_rows(store.group_conversions("gateway", cutoff)),
    )
