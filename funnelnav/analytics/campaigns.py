"""
Campaign ranker.

Campaign events and conversions share `source_id` as the campaign key.
Rates:
- click_rate: clicks per message sent (%)
- conversion_rate: conversions per click (%)
- revenue_per_conversion: revenue / conversions
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from funnelnav.analytics.ratios import safe_percentage, safe_ratio
from funnelnav.analytics.reports import CampaignPerformance, CampaignReport
from funnelnav.store.base import EventStore

DEFAULT_LIMIT = 10


def validate_limit(limit: int) -> int:
    """Raise ValueError unless limit is a positive integer."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"Campaign limit must be a positive integer, got {limit!r}")
    return limit


def score_campaign(row: dict[str, Any]) -> CampaignPerformance:
    """Attach rates to one campaign's raw totals."""
    messages_sent = float(row["messages_sent"] or 0)
    clicks = float(row["clicks"] or 0)
    conversions = int(row["conversions"] or 0)
    revenue = float(row["revenue"] or 0)
    return CampaignPerformance(
        campaign_id=row["campaign_id"],
        messages_sent=messages_sent,
        clicks=clicks,
        conversions=conversions,
        revenue=revenue,
        click_rate=safe_percentage(clicks, messages_sent),
        conversion_rate=safe_percentage(conversions, clicks),
        revenue_per_conversion=safe_ratio(revenue, conversions),
    )


def rank_campaigns(rows: Iterable[dict[str, Any]], limit: int = DEFAULT_LIMIT) -> CampaignReport:
    """Score campaigns and keep the top `limit` by revenue, then conversions."""
    validate_limit(limit)
    campaigns = [score_campaign(row) for row in rows]
    campaigns.sort(key=lambda c: (c.revenue, c.conversions), reverse=True)
    return CampaignReport(campaigns=campaigns[:limit])


def compute_top_campaigns(
    store: EventStore,
    cutoff: date,
    limit: int = DEFAULT_LIMIT,
) -> CampaignReport:
    """Rank campaigns with activity on or after the cutoff."""
    validate_limit(limit)
    return rank_campaigns(store.campaign_totals(cutoff), limit)
