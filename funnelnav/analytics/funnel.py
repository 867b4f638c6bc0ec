"""
Funnel calculator - message sent through to payment.

Steps (each a sum of event values on or after the cutoff):
1. messages_sent: whatsapp / message_sent
2. messages_delivered: whatsapp / message_delivered
3. interactions: interaction / click, reply, link_click
4. payment_attempts: payment / conversion, failure
5. conversions: payment / conversion

The five sums are read independently, so a later step can exceed an
earlier one; percentages are reported as computed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from funnelnav.analytics.ratios import safe_percentage
from funnelnav.analytics.reports import FUNNEL_LABELS, FunnelReport, FunnelStep
from funnelnav.conversions.schema import MetricName, MetricType
from funnelnav.store.base import EventStore


@dataclass(frozen=True)
class StepQuery:
    """Events counted toward one funnel step."""

    label: str
    metric_type: MetricType
    metric_names: tuple[MetricName, ...]


FUNNEL_STEPS = (
    StepQuery("messages_sent", MetricType.WHATSAPP, (MetricName.MESSAGE_SENT,)),
    StepQuery("messages_delivered", MetricType.WHATSAPP, (MetricName.MESSAGE_DELIVERED,)),
    StepQuery(
        "interactions",
        MetricType.INTERACTION,
        (MetricName.CLICK, MetricName.REPLY, MetricName.LINK_CLICK),
    ),
    StepQuery("payment_attempts", MetricType.PAYMENT, (MetricName.CONVERSION, MetricName.FAILURE)),
    StepQuery("conversions", MetricType.PAYMENT, (MetricName.CONVERSION,)),
)


def build_funnel(counts: Sequence[float]) -> FunnelReport:
    """
    Build a funnel report from the five step counts.

    Args:
        counts: Counts in FUNNEL_LABELS order

    Returns:
        FunnelReport; step 1 is always 100%, step i is count[i] / count[i-1]
        as a percentage (2 dp), 0 when the previous count is 0.
    """
    if len(counts) != len(FUNNEL_LABELS):
        raise ValueError(f"Expected {len(FUNNEL_LABELS)} funnel counts, got {len(counts)}")

    steps = []
    for i, (label, count) in enumerate(zip(FUNNEL_LABELS, counts, strict=True)):
        percentage = 100 if i == 0 else safe_percentage(count, counts[i - 1])
        steps.append(FunnelStep(step=i + 1, label=label, count=count, percentage=percentage))

    sent, attempts, conversions = counts[0], counts[3], counts[4]
    return FunnelReport(
        steps=steps,
        conversion_rate=safe_percentage(conversions, sent, digits=4),
        success_rate=safe_percentage(conversions, attempts),
    )


def compute_funnel(
    store: EventStore,
    cutoff: date,
    source_type: str | None = None,
) -> FunnelReport:
    """Query each funnel step from the store and build the report."""
    counts = [
        store.sum_value(step.metric_type, step.metric_names, cutoff, source_type)
        for step in FUNNEL_STEPS
    ]
    return build_funnel(counts)
