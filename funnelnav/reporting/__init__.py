"""
FunnelNav Reporting - Multi-section analytics reports and their export.

Supports:
- Performance summary, revenue, campaign and custom reports
- JSON and CSV export via pandas

Usage:
    from funnelnav.reporting import ReportExporter, ReportGenerator

    generator = ReportGenerator(ConversionAnalytics(store=store))
    report = generator.revenue_report("30days", group_by="week")

    ReportExporter().write(report, "revenue.csv")
"""

from funnelnav.reporting.export import ReportExporter
from funnelnav.reporting.generator import ReportGenerator

__all__ = [
    "ReportGenerator",
    "ReportExporter",
]
