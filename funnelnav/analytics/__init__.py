"""
FunnelNav Analytics - Conversion funnel, attribution and campaign reports.

Usage:
    from funnelnav.analytics import ConversionAnalytics, resolve_cutoff
    from funnelnav.store import InMemoryEventStore

    analytics = ConversionAnalytics(store=InMemoryEventStore(events, conversions))

    funnel = analytics.conversion_funnel("30days")
    attribution = analytics.attribution("30days")
    timing = analytics.time_to_conversion("90days")
    clv = analytics.customer_lifetime_value("1year")
    campaigns = analytics.top_campaigns("30days", limit=5)
    overview = analytics.overview("7days")
"""

from funnelnav.analytics.config import AnalyticsConfig
from funnelnav.analytics.dates import DateRange, resolve_cutoff
from funnelnav.analytics.gating import requires_feature
from funnelnav.analytics.ratios import safe_percentage, safe_ratio
from funnelnav.analytics.reports import (
    AttributionReport,
    AttributionRow,
    CampaignPerformance,
    CampaignReport,
    CLVReport,
    CLVSummary,
    CustomerValue,
    DailyBreakdown,
    FunnelReport,
    FunnelStep,
    OverviewReport,
    OverviewTotals,
    PerformanceReport,
    PeriodTotals,
    TimeToConversionReport,
    TrendPoint,
    TrendReport,
)
from funnelnav.analytics.service import ConversionAnalytics

__all__ = [
    "ConversionAnalytics",
    "AnalyticsConfig",
    "DateRange",
    "resolve_cutoff",
    "requires_feature",
    "safe_ratio",
    "safe_percentage",
    "FunnelReport",
    "FunnelStep",
    "AttributionReport",
    "AttributionRow",
    "TimeToConversionReport",
    "CLVReport",
    "CLVSummary",
    "CustomerValue",
    "CampaignReport",
    "CampaignPerformance",
    "TrendReport",
    "TrendPoint",
    "PerformanceReport",
    "PeriodTotals",
    "OverviewReport",
    "OverviewTotals",
    "DailyBreakdown",
]
