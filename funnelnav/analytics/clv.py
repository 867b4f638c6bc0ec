"""Customer lifetime value over conversions with a known customer."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any

from funnelnav.analytics.ratios import safe_percentage, safe_ratio
from funnelnav.analytics.reports import CLVReport, CLVSummary, CustomerValue
from funnelnav.store.base import EventStore


def lifespan_days(first_purchase: date | datetime, last_purchase: date | datetime) -> int:
    """Whole calendar days between first and last purchase."""
    first = first_purchase.date() if isinstance(first_purchase, datetime) else first_purchase
    last = last_purchase.date() if isinstance(last_purchase, datetime) else last_purchase
    return (last - first).days


def to_customers(groups: Iterable[dict[str, Any]]) -> list[CustomerValue]:
    """Convert per-customer rows to CustomerValues, highest revenue first.

    Customers with no payments are dropped.
    """
    customers = [
        CustomerValue(
            customer_id=group["customer_id"],
            total_payments=int(group["total_payments"]),
            total_revenue=float(group["total_revenue"] or 0),
            avg_order_value=float(group["avg_order_value"] or 0),
            first_purchase=group["first_purchase"],
            last_purchase=group["last_purchase"],
            customer_lifespan_days=lifespan_days(group["first_purchase"], group["last_purchase"]),
        )
        for group in groups
        if group["total_payments"]
    ]
    customers.sort(key=lambda c: c.total_revenue, reverse=True)
    return customers


def summarize_customers(customers: Sequence[CustomerValue]) -> CLVSummary:
    total_revenue = sum(c.total_revenue for c in customers)
    repeat_customers = sum(1 for c in customers if c.total_payments > 1)
    return CLVSummary(
        total_customers=len(customers),
        total_revenue=total_revenue,
        average_clv=safe_ratio(total_revenue, len(customers)),
        repeat_customer_rate=safe_percentage(repeat_customers, len(customers)),
    )


def compute_clv(store: EventStore, cutoff: date) -> CLVReport:
    """Per-customer value for conversions on or after the cutoff."""
    customers = to_customers(store.group_by_customer(cutoff))
    return CLVReport(customers=customers, summary=summarize_customers(customers))
