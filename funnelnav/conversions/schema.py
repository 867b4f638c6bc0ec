"""
Event and conversion schema - the two record sets every report reads.

Two append-only tables feed the analytics:
- Metric events: messaging, interaction, payment and campaign occurrences
- Conversions: one row per successful payment, with attribution keys

Both records are immutable once written. Events are summed by `value`
(batch sends carry value > 1), never counted row by row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any


class MetricType(str, Enum):
    """Category of a recorded metric event."""

    WHATSAPP = "whatsapp"
    INTERACTION = "interaction"
    PAYMENT = "payment"
    CAMPAIGN = "campaign"


class MetricName(str, Enum):
    """Event names with funnel or campaign meaning."""

    # whatsapp
    MESSAGE_SENT = "message_sent"
    MESSAGE_DELIVERED = "message_delivered"

    # interaction
    CLICK = "click"
    REPLY = "reply"
    LINK_CLICK = "link_click"

    # payment
    CONVERSION = "conversion"
    FAILURE = "failure"

    # campaign (click is shared with interaction)
    SENT = "sent"


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so all record times compare."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def _start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=UTC)


def _parse_datetime(value: Any, field_name: str) -> datetime:
    """Parse an ISO string or pass through a datetime, naive values as UTC."""
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, str):
        try:
            return _as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError as e:
            raise ValueError(f"Invalid {field_name} format: {value}") from e
    raise ValueError(f"Invalid {field_name}: {value!r}")


def _parse_date(value: Any, field_name: str) -> date:
    """Parse an ISO date string, a date, or the date part of a datetime."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError as e:
            raise ValueError(f"Invalid {field_name} format: {value}") from e
    raise ValueError(f"Invalid {field_name}: {value!r}")


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class MetricEvent:
    """
    One recorded occurrence in the metric event log.

    `metric_type` + `metric_name` fully determine what the event means to
    the funnel. `date` is the day bucket used for range filtering;
    `created_at` orders events within a day and defaults to midnight UTC
    of `date`. Naive timestamps are taken as UTC.

    Example:
        event = MetricEvent(
            metric_type="whatsapp",
            metric_name="message_sent",
            date=date(2025, 1, 15),
            source_type="whatsapp",
            customer_id="C-001",
            created_at=datetime(2025, 1, 15, 9, 30, tzinfo=UTC),
        )
    """

    metric_type: str
    metric_name: str
    date: date
    value: float = 1.0
    source_type: str | None = None
    source_id: str | None = None
    customer_id: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        # Enum members hash by name, so store plain strings for set lookups
        object.__setattr__(self, "metric_type", _enum_value(self.metric_type))
        object.__setattr__(self, "metric_name", _enum_value(self.metric_name))
        if self.created_at is None:
            created_at = _start_of_day(self.date)
        else:
            created_at = _as_utc(self.created_at)
        object.__setattr__(self, "created_at", created_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for BigQuery insertion."""
        return {
            "metric_type": self.metric_type,
            "metric_name": self.metric_name,
            "metric_value": self.value,
            "metric_date": self.date.isoformat(),
            "source_type": self.source_type,
            "source_id": self.source_id,
            "customer_id": self.customer_id,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetricEvent:
        """Create MetricEvent from dictionary.

        Accepts both the storage column names (`metric_value`,
        `metric_date`) and the attribute names (`value`, `date`).

        Raises:
            ValueError: If metric_type/metric_name are missing, or value or
                dates cannot be parsed.
        """
        for required in ("metric_type", "metric_name"):
            if not data.get(required):
                raise ValueError(f"Missing required field: {required}")

        raw_value = data.get("metric_value", data.get("value", 1))
        try:
            value = float(raw_value if raw_value is not None else 1)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid value: {raw_value}") from e

        created_raw = data.get("created_at")
        created_at = (
            _parse_datetime(created_raw, "created_at") if created_raw is not None else None
        )

        date_raw = data.get("metric_date", data.get("date"))
        if date_raw is not None:
            event_date = _parse_date(date_raw, "date")
        elif created_at is not None:
            event_date = created_at.date()
        else:
            event_date = datetime.now(UTC).date()

        return cls(
            metric_type=data["metric_type"],
            metric_name=data["metric_name"],
            date=event_date,
            value=value,
            source_type=data.get("source_type"),
            source_id=data.get("source_id"),
            customer_id=data.get("customer_id"),
            created_at=created_at,
        )


@dataclass(frozen=True)
class Conversion:
    """
    One completed payment attributable to a customer journey.

    `payment_id` is unique across the table and `value` is never negative.
    Journey and attribution payloads are carried but never interpreted.

    Example:
        conversion = Conversion(
            payment_id="PAY-123",
            customer_id="C-001",
            source_type="whatsapp",
            source_id="CAMP-7",
            value=150.00,
            currency="NGN",
            gateway="paystack",
            conversion_date=datetime.now(UTC),
        )
    """

    payment_id: str
    gateway: str
    value: float = 0.0
    currency: str = "NGN"
    source_type: str = "direct"
    source_id: str | None = None
    customer_id: str | None = None
    conversion_date: datetime = field(default_factory=lambda: datetime.now(UTC))

    # Opaque payloads
    customer_journey: list[dict[str, Any]] = field(default_factory=list, compare=False)
    attribution_data: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"Conversion value must be >= 0, got {self.value}")
        object.__setattr__(self, "conversion_date", _as_utc(self.conversion_date))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for BigQuery insertion."""
        return {
            "payment_id": self.payment_id,
            "customer_id": self.customer_id,
            "source_type": self.source_type,
            "source_id": self.source_id,
            "conversion_value": self.value,
            "currency": self.currency,
            "gateway": self.gateway,
            "conversion_date": self.conversion_date.isoformat(),
            "customer_journey": self.customer_journey,
            "attribution_data": self.attribution_data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Conversion:
        """Create Conversion from dictionary.

        Args:
            data: Dictionary containing conversion data. `conversion_value`
                and `value` are both accepted for the amount.

        Returns:
            Conversion instance.

        Raises:
            ValueError: If payment_id or gateway is missing, the value is not
                a non-negative number, or conversion_date cannot be parsed.
        """
        for required in ("payment_id", "gateway"):
            if not data.get(required):
                raise ValueError(f"Missing required field: {required}")

        raw_value = data.get("conversion_value", data.get("value", 0))
        try:
            value = float(raw_value if raw_value is not None else 0)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid value: {raw_value}") from e

        date_raw = data.get("conversion_date")
        conversion_date = (
            _parse_datetime(date_raw, "conversion_date")
            if date_raw is not None
            else datetime.now(UTC)
        )

        return cls(
            payment_id=str(data["payment_id"]),
            gateway=data["gateway"],
            value=value,
            currency=data.get("currency") or "NGN",
            source_type=data.get("source_type") or "direct",
            source_id=data.get("source_id"),
            customer_id=data.get("customer_id"),
            conversion_date=conversion_date,
            customer_journey=data.get("customer_journey") or [],
            attribution_data=data.get("attribution_data") or {},
        )
