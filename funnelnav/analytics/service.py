"""
ConversionAnalytics - the report entry points.

Each method takes a date-range token ("7days", "30days", "90days",
"1year"), resolves it to a cutoff and reduces store query results into a
report dataclass. When analytics are unavailable every method returns the
report's empty() shape without querying the store. Store failures
propagate as StoreError; no partial report is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from funnelnav.analytics.attribution import compute_attribution
from funnelnav.analytics.campaigns import compute_top_campaigns
from funnelnav.analytics.clv import compute_clv
from funnelnav.analytics.config import AnalyticsConfig
from funnelnav.analytics.dates import DateRange, resolve_cutoff, today_utc
from funnelnav.analytics.funnel import compute_funnel
from funnelnav.analytics.gating import requires_feature
from funnelnav.analytics.overview import compute_overview
from funnelnav.analytics.reports import (
    AttributionReport,
    CampaignReport,
    CLVReport,
    FunnelReport,
    OverviewReport,
    PerformanceReport,
    TimeToConversionReport,
    TrendReport,
)
from funnelnav.analytics.timing import compute_time_to_conversion
from funnelnav.analytics.trends import compute_performance, compute_trends
from funnelnav.store.base import EventStore
from funnelnav.store.bigquery import BigQueryEventStore
from funnelnav.store.cache import CachedEventStore
from funnelnav.store.ratelimit import RateLimiter

logger = logging.getLogger(__name__)


class ConversionAnalytics:
    """
    Funnel, attribution, timing, CLV and campaign reports over an EventStore.

    Example:
        analytics = ConversionAnalytics(store=InMemoryEventStore(events, conversions))
        funnel = analytics.conversion_funnel("30days", source_type="whatsapp")
        print(funnel.conversion_rate)

        # Without a store, BigQuery is used behind a cache and rate limiter
        analytics = ConversionAnalytics()
        campaigns = analytics.top_campaigns("90days", limit=5)
    """

    def __init__(
        self,
        store: EventStore | None = None,
        config: AnalyticsConfig | None = None,
        feature_gate: Callable[[], bool] | None = None,
        today: Callable[[], date] = today_utc,
    ):
        """
        Initialize the analytics service.

        Args:
            store: Event store to query (default: cached BigQueryEventStore)
            config: Analytics configuration (default: from environment)
            feature_gate: Availability check; overrides config.premium_enabled
            today: Reference date source for cutoffs
        """
        self.config = config or AnalyticsConfig.from_env()
        self.feature_gate = feature_gate
        self._today = today
        self._store = store

    @property
    def store(self) -> EventStore:
        """Lazy initialization of the default BigQuery store."""
        if self._store is None:
            self._store = CachedEventStore(
                BigQueryEventStore(),
                ttl=self.config.cache_ttl,
                maxsize=self.config.cache_maxsize,
                limiter=RateLimiter(
                    per_minute=self.config.per_minute_limit,
                    per_hour=self.config.per_hour_limit,
                ),
            )
        return self._store

    def feature_available(self) -> bool:
        """Whether reports may be computed."""
        if self.feature_gate is not None:
            return bool(self.feature_gate())
        return self.config.premium_enabled

    def today(self) -> date:
        """Reference date for cutoffs and comparisons."""
        return self._today()

    def cutoff(self, date_range: str | DateRange) -> date:
        """Earliest date included by a date-range token."""
        return resolve_cutoff(date_range, today=self.today())

    @requires_feature(FunnelReport)
    def conversion_funnel(
        self,
        date_range: str | DateRange,
        source_type: str | None = None,
    ) -> FunnelReport:
        """Message-to-payment funnel, optionally for one source type."""
        cutoff = self.cutoff(date_range)
        logger.info(f"Computing conversion funnel since {cutoff} (source_type={source_type})")
        return compute_funnel(self.store, cutoff, source_type)

    @requires_feature(AttributionReport)
    def attribution(self, date_range: str | DateRange) -> AttributionReport:
        """Revenue by source type and by payment gateway."""
        cutoff = self.cutoff(date_range)
        logger.info(f"Computing attribution since {cutoff}")
        return compute_attribution(self.store, cutoff)

    @requires_feature(TimeToConversionReport)
    def time_to_conversion(self, date_range: str | DateRange) -> TimeToConversionReport:
        """Distribution of hours from first whatsapp event to conversion."""
        cutoff = self.cutoff(date_range)
        logger.info(f"Computing time to conversion since {cutoff}")
        return compute_time_to_conversion(self.store, cutoff)

    @requires_feature(CLVReport)
    def customer_lifetime_value(self, date_range: str | DateRange) -> CLVReport:
        """Per-customer value with a repeat-purchase summary."""
        cutoff = self.cutoff(date_range)
        logger.info(f"Computing customer lifetime value since {cutoff}")
        return compute_clv(self.store, cutoff)

    @requires_feature(CampaignReport)
    def top_campaigns(self, date_range: str | DateRange, limit: int | None = None) -> CampaignReport:
        """
        Highest-revenue campaigns.

        Raises:
            ValueError: If limit is not a positive integer
        """
        limit = self.config.default_campaign_limit if limit is None else limit
        cutoff = self.cutoff(date_range)
        logger.info(f"Ranking top {limit} campaigns since {cutoff}")
        return compute_top_campaigns(self.store, cutoff, limit)

    @requires_feature(TrendReport)
    def conversion_trends(self, date_range: str | DateRange, group_by: str = "day") -> TrendReport:
        """Conversions and revenue per day, week or month."""
        cutoff = self.cutoff(date_range)
        logger.info(f"Computing {group_by} conversion trends since {cutoff}")
        return compute_trends(self.store, cutoff, group_by)

    @requires_feature(PerformanceReport)
    def performance_comparison(self) -> PerformanceReport:
        """Revenue and conversions for the last 7 days against the 7 before."""
        logger.info("Comparing weekly performance")
        return compute_performance(self.store, self.today())

    @requires_feature(OverviewReport)
    def overview(self, date_range: str | DateRange) -> OverviewReport:
        """Revenue, conversions, interactions and active contacts, with a daily breakdown."""
        cutoff = self.cutoff(date_range)
        logger.info(f"Computing overview since {cutoff}")
        return compute_overview(self.store, cutoff, self.today())
