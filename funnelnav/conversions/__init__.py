"""
FunnelNav Conversions - record schema for messaging-to-payment analytics.

Provides:
- MetricEvent: one row of the append-only event log
- Conversion: one successful payment with its attribution keys
- MetricType / MetricName: the vocabulary the funnel understands

Usage:
    from funnelnav.conversions import Conversion, MetricEvent, MetricType

    event = MetricEvent.from_dict({
        "metric_type": MetricType.WHATSAPP,
        "metric_name": "message_sent",
        "metric_date": "2025-01-15",
    })
    conversion = Conversion.from_dict({
        "payment_id": "PAY-1",
        "gateway": "paystack",
        "conversion_value": 2500,
    })
"""

from funnelnav.conversions.schema import (
    Conversion,
    MetricEvent,
    MetricName,
    MetricType,
)

__all__ = [
    "Conversion",
    "MetricEvent",
    "MetricName",
    "MetricType",
]
