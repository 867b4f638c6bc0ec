"""
ReportGenerator - assemble analytics into titled, multi-section reports.

Reports are plain dicts:
- report_info: title, date range, cutoff and generation time
- one key per section, each a report's to_dict() or a summary dict

Sections are JSON-friendly and can be exported with ReportExporter.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from funnelnav.analytics.dates import DateRange, parse_range
from funnelnav.analytics.funnel import FUNNEL_STEPS
from funnelnav.analytics.reports import FunnelReport
from funnelnav.analytics.service import ConversionAnalytics
from funnelnav.analytics.summary import (
    summarize_campaigns,
    summarize_performance,
    summarize_revenue,
)
from funnelnav.conversions.schema import MetricType

logger = logging.getLogger(__name__)

# Custom report sections
CUSTOM_METRICS = (
    "conversion_funnel",
    "revenue_trends",
    "attribution",
    "campaigns",
    "customer_ltv",
    "time_to_conversion",
    "overview",
)

DEFAULT_CUSTOM_RANGE = DateRange.LAST_30_DAYS
DEFAULT_CUSTOM_CAMPAIGN_LIMIT = 20


class ReportGenerator:
    """
    Build overview, performance, revenue, campaign and custom reports.

    Example:
        generator = ReportGenerator(ConversionAnalytics(store=store))
        report = generator.performance_summary("30days")
        print(report["summary_metrics"]["conversion_rate"])
    """

    def __init__(
        self,
        analytics: ConversionAnalytics,
        now: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the generator.

        Args:
            analytics: Analytics service the sections are computed with
            now: Clock for generated_at (default: current UTC time)
        """
        self.analytics = analytics
        self._now = now or (lambda: datetime.now(UTC))

    def _report_info(self, title: str, date_range: str | DateRange, **extra: Any) -> dict[str, Any]:
        resolved = parse_range(date_range)
        return {
            "title": title,
            "date_range": resolved.value,
            "start_date": self.analytics.cutoff(resolved).isoformat(),
            "end_date": self.analytics.today().isoformat(),
            "generated_at": self._now().isoformat(),
            **extra,
        }

    def _performance_totals(self, date_range: str | DateRange) -> dict[str, Any]:
        if not self.analytics.feature_available():
            return summarize_performance(0, 0, 0, 0)

        store = self.analytics.store
        cutoff = self.analytics.cutoff(date_range)
        sent_step, _, interaction_step, _, _ = FUNNEL_STEPS
        messages = store.sum_value(sent_step.metric_type, sent_step.metric_names, cutoff)
        interactions = store.sum_value(
            interaction_step.metric_type, interaction_step.metric_names, cutoff
        )
        totals = store.conversion_totals(cutoff, self.analytics.today())
        return summarize_performance(
            total_messages=messages,
            total_interactions=interactions,
            total_conversions=int(totals["conversions"]),
            total_revenue=float(totals["revenue"]),
        )

    def overview_report(self, date_range: str | DateRange) -> dict[str, Any]:
        """Dashboard totals and the per-day breakdown for a date range."""
        logger.info(f"Generating overview report for {date_range}")
        return {
            "report_info": self._report_info("Analytics Overview", date_range),
            "overview": self.analytics.overview(date_range).to_dict(),
        }

    def performance_summary(self, date_range: str | DateRange) -> dict[str, Any]:
        """Headline metrics, funnel and attribution for a date range."""
        logger.info(f"Generating performance summary for {date_range}")
        return {
            "report_info": self._report_info("Performance Summary Report", date_range),
            "summary_metrics": self._performance_totals(date_range),
            "conversion_funnel": self.analytics.conversion_funnel(date_range).to_dict(),
            "attribution_analysis": self.analytics.attribution(date_range).to_dict(),
        }

    def revenue_report(self, date_range: str | DateRange, group_by: str = "day") -> dict[str, Any]:
        """Revenue trends, attribution and customer value for a date range."""
        logger.info(f"Generating revenue report for {date_range} by {group_by}")
        trends = self.analytics.conversion_trends(date_range, group_by)
        return {
            "report_info": self._report_info(
                "Revenue Analysis Report", date_range, group_by=trends.granularity
            ),
            "revenue_trends": trends.to_dict(),
            "revenue_attribution": self.analytics.attribution(date_range).to_dict(),
            "customer_lifetime_value": self.analytics.customer_lifetime_value(date_range).to_dict(),
            "revenue_summary": summarize_revenue(trends.periods),
        }

    def campaign_report(self, date_range: str | DateRange) -> dict[str, Any]:
        """Top campaigns with the whatsapp funnel alongside."""
        logger.info(f"Generating campaign report for {date_range}")
        campaigns = self.analytics.top_campaigns(
            date_range, limit=self.analytics.config.report_campaign_limit
        )
        funnel: FunnelReport = self.analytics.conversion_funnel(
            date_range, source_type=MetricType.WHATSAPP.value
        )
        return {
            "report_info": self._report_info("Campaign Performance Report", date_range),
            "campaign_performance": campaigns.to_dict(),
            "whatsapp_funnel": funnel.to_dict(),
            "campaign_summary": summarize_campaigns(campaigns.campaigns),
        }

    def custom_report(
        self,
        metrics: Iterable[str],
        date_range: str | DateRange = DEFAULT_CUSTOM_RANGE,
        title: str = "Custom Analytics Report",
        group_by: str = "day",
        campaign_limit: int = DEFAULT_CUSTOM_CAMPAIGN_LIMIT,
    ) -> dict[str, Any]:
        """
        Build a report from a chosen list of sections.

        Args:
            metrics: Section names from CUSTOM_METRICS; unknown names are skipped
            date_range: Date-range token
            title: Report title
            group_by: Trend granularity for revenue_trends
            campaign_limit: Number of campaigns for the campaigns section

        Returns:
            Report dict with report_info and one key per requested section
        """
        logger.info(f"Generating custom report {title!r} for {date_range}")
        builders: dict[str, Callable[[], Any]] = {
            "conversion_funnel": lambda: self.analytics.conversion_funnel(date_range),
            "revenue_trends": lambda: self.analytics.conversion_trends(date_range, group_by),
            "attribution": lambda: self.analytics.attribution(date_range),
            "campaigns": lambda: self.analytics.top_campaigns(date_range, limit=campaign_limit),
            "customer_ltv": lambda: self.analytics.customer_lifetime_value(date_range),
            "time_to_conversion": lambda: self.analytics.time_to_conversion(date_range),
            "overview": lambda: self.analytics.overview(date_range),
        }

        report: dict[str, Any] = {"report_info": self._report_info(title, date_range)}
        for metric in metrics:
            builder = builders.get(metric)
            if builder is None:
                logger.warning(f"Skipping unknown report metric: {metric}")
                continue
            report[metric] = builder().to_dict()
        return report
