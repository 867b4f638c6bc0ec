"""
Overview dashboard - headline totals with a per-day breakdown.

- interactions: the funnel's interaction events (click, reply, link_click)
- active_contacts: distinct customers with any interaction event
- conversion_rate: conversions per interaction, as a percentage (2 dp)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from funnelnav.analytics.funnel import FUNNEL_STEPS
from funnelnav.analytics.ratios import safe_percentage
from funnelnav.analytics.reports import DailyBreakdown, OverviewReport, OverviewTotals
from funnelnav.conversions.schema import MetricType
from funnelnav.store.base import EventStore, period_key

INTERACTION_STEP = FUNNEL_STEPS[2]


def build_daily_breakdown(
    trend_rows: Iterable[dict[str, Any]],
    interaction_rows: Iterable[dict[str, Any]],
) -> list[DailyBreakdown]:
    """
    Merge daily conversion trend rows with daily interaction totals.

    Days present on only one side get zeros for the other.
    """
    days: dict[str, DailyBreakdown] = {}
    for row in trend_rows:
        days[row["period"]] = DailyBreakdown(
            day=row["period"],
            revenue=float(row["revenue"] or 0),
            conversions=int(row["conversions"] or 0),
            interactions=0,
        )
    for row in interaction_rows:
        day = period_key(row["day"], "day")
        entry = days.setdefault(
            day, DailyBreakdown(day=day, revenue=0, conversions=0, interactions=0)
        )
        entry.interactions += float(row["total"] or 0)
    return sorted(days.values(), key=lambda d: d.day)


def compute_overview(store: EventStore, cutoff: date, today: date) -> OverviewReport:
    """Query the dashboard figures for [cutoff, today] and build the report."""
    interactions = store.sum_value(
        INTERACTION_STEP.metric_type, INTERACTION_STEP.metric_names, cutoff
    )
    totals = store.conversion_totals(cutoff, today)
    active_contacts = store.distinct_customers(MetricType.INTERACTION, cutoff)
    daily = build_daily_breakdown(
        store.conversion_trend(cutoff, "day"),
        store.daily_totals(INTERACTION_STEP.metric_type, INTERACTION_STEP.metric_names, cutoff),
    )

    conversions = int(totals["conversions"])
    return OverviewReport(
        totals=OverviewTotals(
            revenue=float(totals["revenue"]),
            conversions=conversions,
            interactions=interactions,
            active_contacts=int(active_contacts),
        ),
        daily_breakdown=daily,
        conversion_rate=safe_percentage(conversions, interactions),
    )
