"""Headline figures for generated reports."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from funnelnav.analytics.ratios import safe_percentage, safe_ratio
from funnelnav.analytics.reports import CampaignPerformance, TrendPoint


def summarize_performance(
    total_messages: float,
    total_interactions: float,
    total_conversions: int,
    total_revenue: float,
) -> dict[str, Any]:
    """Message, interaction and conversion totals with their rates."""
    return {
        "total_messages": total_messages,
        "total_interactions": total_interactions,
        "total_conversions": total_conversions,
        "total_revenue": total_revenue,
        "conversion_rate": safe_percentage(total_conversions, total_messages, digits=4),
        "avg_order_value": safe_ratio(total_revenue, total_conversions),
        "interaction_rate": safe_percentage(total_interactions, total_messages),
    }


def summarize_revenue(periods: Sequence[TrendPoint]) -> dict[str, Any]:
    """
    Revenue totals across trend periods.

    growth_rate compares the first and last period, and is 0 with fewer
    than two periods or no first-period revenue.
    """
    if not periods:
        return {
            "total_revenue": 0,
            "total_conversions": 0,
            "avg_period_revenue": 0,
            "growth_rate": 0,
        }

    total_revenue = sum(p.revenue for p in periods)
    growth = 0.0
    if len(periods) >= 2:
        first, last = periods[0].revenue, periods[-1].revenue
        growth = safe_percentage(last - first, first)

    return {
        "total_revenue": total_revenue,
        "total_conversions": sum(p.conversions for p in periods),
        "avg_period_revenue": round(total_revenue / len(periods), 2),
        "growth_rate": growth,
    }


def summarize_campaigns(campaigns: Sequence[CampaignPerformance]) -> dict[str, Any]:
    """Totals across campaigns with click and conversion rates pooled over all of them."""
    total_messages = sum(c.messages_sent for c in campaigns)
    total_clicks = sum(c.clicks for c in campaigns)
    total_conversions = sum(c.conversions for c in campaigns)
    return {
        "total_campaigns": len(campaigns),
        "total_messages_sent": total_messages,
        "avg_click_rate": safe_percentage(total_clicks, total_messages),
        "avg_conversion_rate": safe_percentage(total_conversions, total_clicks),
        "total_campaign_revenue": sum(c.revenue for c in campaigns),
    }
