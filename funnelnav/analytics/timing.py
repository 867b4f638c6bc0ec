"""
Time-to-conversion - hours from a customer's first whatsapp event to payment.

Conversions whose customer has no whatsapp event at or before the payment
are left out of the statistics and counted as excluded.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime

from funnelnav.analytics.reports import TIME_BUCKETS, TimeToConversionReport
from funnelnav.conversions.schema import MetricType
from funnelnav.store.base import EventStore

logger = logging.getLogger(__name__)


def elapsed_hours(first_interaction: datetime, conversion_date: datetime) -> float:
    """Hours between two moments, rounded to 2 dp. May be zero."""
    return round((conversion_date - first_interaction).total_seconds() / 3600, 2)


def median(values: Sequence[float]) -> float:
    """Middle value, or the mean of the two middle values for even lengths."""
    if not values:
        return 0.0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[middle]
    return (ordered[middle - 1] + ordered[middle]) / 2


def bucket_for(hours: float) -> str:
    """Return the histogram bucket for an elapsed time (upper bounds inclusive)."""
    for label, upper in TIME_BUCKETS:
        if upper is None or hours <= upper:
            return label
    return TIME_BUCKETS[-1][0]  # pragma: no cover


def distribution(hours: Sequence[float]) -> dict[str, int]:
    """Count elapsed times per bucket. Every bucket is present."""
    counts = {label: 0 for label, _ in TIME_BUCKETS}
    for value in hours:
        counts[bucket_for(value)] += 1
    return counts


def summarize_times(hours: Sequence[float], excluded_count: int = 0) -> TimeToConversionReport:
    """Build the report from a list of elapsed hours."""
    if not hours:
        report = TimeToConversionReport.empty()
        report.excluded_count = excluded_count
        return report

    return TimeToConversionReport(
        avg_time_hours=round(sum(hours) / len(hours), 2),
        median_time_hours=round(median(hours), 2),
        distribution=distribution(hours),
        analyzed_count=len(hours),
        excluded_count=excluded_count,
    )


def compute_time_to_conversion(store: EventStore, cutoff: date) -> TimeToConversionReport:
    """Measure time to conversion for customer conversions on or after the cutoff."""
    hours = []
    excluded = 0
    for touch in store.conversion_first_touches(MetricType.WHATSAPP, cutoff):
        if touch["first_interaction"] is None:
            excluded += 1
            continue
        hours.append(elapsed_hours(touch["first_interaction"], touch["conversion_date"]))

    if excluded:
        logger.debug(f"{excluded} conversions had no prior whatsapp event")
    return summarize_times(hours, excluded_count=excluded)
