"""
Conversion trends and period-over-period comparison.

Trend periods are labelled:
- day: 2025-01-15
- week: 2025-W03 (ISO week)
- month: 2025-01
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from funnelnav.analytics.ratios import safe_percentage
from funnelnav.analytics.reports import PerformanceReport, PeriodTotals, TrendPoint, TrendReport
from funnelnav.store.base import GRANULARITIES, EventStore

logger = logging.getLogger(__name__)

COMPARISON_DAYS = 7


def parse_granularity(group_by: str | None) -> str:
    """Return a supported granularity, falling back to day."""
    if group_by in GRANULARITIES:
        return group_by
    logger.debug(f"Unknown trend granularity {group_by!r}, using day")
    return "day"


def compute_trends(store: EventStore, cutoff: date, group_by: str = "day") -> TrendReport:
    """Conversions per period on or after the cutoff, oldest period first."""
    granularity = parse_granularity(group_by)
    points = [
        TrendPoint(
            period=row["period"],
            conversions=int(row["conversions"] or 0),
            revenue=float(row["revenue"] or 0),
            avg_order_value=float(row["avg_order_value"] or 0),
            unique_customers=int(row["unique_customers"] or 0),
        )
        for row in store.conversion_trend(cutoff, granularity)
    ]
    points.sort(key=lambda p: p.period)
    return TrendReport(granularity=granularity, periods=points)


def growth_rate(current: float, previous: float) -> float:
    """Percentage change from previous to current, 0 when previous is 0."""
    return safe_percentage(current - previous, previous)


def compute_performance(store: EventStore, today: date) -> PerformanceReport:
    """
    Compare the last 7 days with the 7 days before them.

    The current window is [today - 7, today]; the previous window is
    [today - 14, today - 8].
    """
    current_start = today - timedelta(days=COMPARISON_DAYS)
    previous_start = today - timedelta(days=COMPARISON_DAYS * 2)
    previous_end = current_start - timedelta(days=1)

    current = store.conversion_totals(current_start, today)
    previous = store.conversion_totals(previous_start, previous_end)

    return PerformanceReport(
        current_period=PeriodTotals(
            start=current_start,
            end=today,
            revenue=float(current["revenue"]),
            conversions=int(current["conversions"]),
        ),
        previous_period=PeriodTotals(
            start=previous_start,
            end=previous_end,
            revenue=float(previous["revenue"]),
            conversions=int(previous["conversions"]),
        ),
        revenue_growth=growth_rate(current["revenue"], previous["revenue"]),
        conversion_growth=growth_rate(current["conversions"], previous["conversions"]),
    )
