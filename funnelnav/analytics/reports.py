"""
Report dataclasses returned by ConversionAnalytics.

Every report provides:
- to_dict(): JSON-friendly representation (dates as ISO strings)
- empty(): the same shape with zero/empty values, returned when
  analytics are unavailable
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

# Funnel steps, in order
FUNNEL_LABELS = (
    "messages_sent",
    "messages_delivered",
    "interactions",
    "payment_attempts",
    "conversions",
)

# Time-to-conversion buckets: (label, inclusive upper bound in hours)
TIME_BUCKETS = (
    ("0-1h", 1),
    ("1-6h", 6),
    ("6-24h", 24),
    ("1-3d", 72),
    ("3-7d", 168),
    ("7d+", None),
)


def _plain(value: Any) -> Any:
    """Convert dates inside asdict() output to ISO strings."""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


class _Report:
    def to_dict(self) -> dict[str, Any]:
        return _plain(asdict(self))


@dataclass
class FunnelStep:
    """One funnel stage: its count and the percentage kept from the previous stage."""

    step: int
    label: str
    count: float
    percentage: float


@dataclass
class FunnelReport(_Report):
    """Message-to-payment funnel."""

    steps: list[FunnelStep]
    conversion_rate: float
    success_rate: float

    def count(self, label: str) -> float:
        """Return the count for a step label."""
        for step in self.steps:
            if step.label == label:
                return step.count
        raise KeyError(label)

    @classmethod
    def empty(cls) -> FunnelReport:
        return cls(
            steps=[
                FunnelStep(step=i, label=label, count=0, percentage=100 if i == 1 else 0)
                for i, label in enumerate(FUNNEL_LABELS, start=1)
            ],
            conversion_rate=0,
            success_rate=0,
        )


@dataclass
class AttributionRow:
    """Conversions and revenue attributed to one source or gateway."""

    key: str | None
    conversion_count: int
    total_revenue: float
    avg_revenue: float


@dataclass
class AttributionReport(_Report):
    """Revenue attribution by source type and by payment gateway."""

    by_source: list[AttributionRow] = field(default_factory=list)
    by_gateway: list[AttributionRow] = field(default_factory=list)

    @classmethod
    def empty(cls) -> AttributionReport:
        return cls()


@dataclass
class TimeToConversionReport(_Report):
    """Hours from a customer's first whatsapp event to their conversion."""

    avg_time_hours: float
    median_time_hours: float
    distribution: dict[str, int]
    analyzed_count: int = 0
    excluded_count: int = 0

    @classmethod
    def empty(cls) -> TimeToConversionReport:
        return cls(
            avg_time_hours=0,
            median_time_hours=0,
            distribution={label: 0 for label, _ in TIME_BUCKETS},
        )


@dataclass
class CustomerValue:
    """Purchase history of one customer."""

    customer_id: str
    total_payments: int
    total_revenue: float
    avg_order_value: float
    first_purchase: datetime
    last_purchase: datetime
    customer_lifespan_days: int


@dataclass
class CLVSummary:
    total_customers: int
    total_revenue: float
    average_clv: float
    repeat_customer_rate: float


@dataclass
class CLVReport(_Report):
    """Customer lifetime value, highest revenue first."""

    customers: list[CustomerValue]
    summary: CLVSummary

    @classmethod
    def empty(cls) -> CLVReport:
        return cls(
            customers=[],
            summary=CLVSummary(
                total_customers=0,
                total_revenue=0,
                average_clv=0,
                repeat_customer_rate=0,
            ),
        )


@dataclass
class CampaignPerformance:
    """Delivery, engagement and revenue for one campaign."""

    campaign_id: str
    messages_sent: float
    clicks: float
    conversions: int
    revenue: float
    click_rate: float
    conversion_rate: float
    revenue_per_conversion: float


@dataclass
class CampaignReport(_Report):
    """Campaigns ranked by revenue, then conversions."""

    campaigns: list[CampaignPerformance] = field(default_factory=list)

    @classmethod
    def empty(cls) -> CampaignReport:
        return cls()


@dataclass
class TrendPoint:
    period: str
    conversions: int
    revenue: float
    avg_order_value: float
    unique_customers: int


@dataclass
class TrendReport(_Report):
    """Conversions per day, ISO week or month, oldest period first."""

    granularity: str = "day"
    periods: list[TrendPoint] = field(default_factory=list)

    @classmethod
    def empty(cls) -> TrendReport:
        return cls()


@dataclass
class PeriodTotals:
    start: date | None
    end: date | None
    revenue: float
    conversions: int


@dataclass
class PerformanceReport(_Report):
    """Last 7 days against the 7 days before."""

    current_period: PeriodTotals
    previous_period: PeriodTotals
    revenue_growth: float
    conversion_growth: float

    @classmethod
    def empty(cls) -> PerformanceReport:
        return cls(
            current_period=PeriodTotals(start=None, end=None, revenue=0, conversions=0),
            previous_period=PeriodTotals(start=None, end=None, revenue=0, conversions=0),
            revenue_growth=0,
            conversion_growth=0,
        )


@dataclass
class OverviewTotals:
    revenue: float
    conversions: int
    interactions: float
    active_contacts: int


@dataclass
class DailyBreakdown:
    """Revenue, conversions and interactions on one day."""

    day: str
    revenue: float
    conversions: int
    interactions: float


@dataclass
class OverviewReport(_Report):
    """Dashboard totals with a per-day breakdown, oldest day first."""

    totals: OverviewTotals
    daily_breakdown: list[DailyBreakdown]
    conversion_rate: float

    @classmethod
    def empty(cls) -> OverviewReport:
        return cls(
            totals=OverviewTotals(revenue=0, conversions=0, interactions=0, active_contacts=0),
            daily_breakdown=[],
            conversion_rate=0,
        )
