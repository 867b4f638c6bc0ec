"""Date-range tokens and their cutoff dates."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from enum import Enum

logger = logging.getLogger(__name__)


class DateRange(str, Enum):
    """Supported reporting windows."""

    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_90_DAYS = "90days"
    LAST_YEAR = "1year"

    @property
    def days(self) -> int:
        return RANGE_DAYS[self]


RANGE_DAYS = {
    DateRange.LAST_7_DAYS: 7,
    DateRange.LAST_30_DAYS: 30,
    DateRange.LAST_90_DAYS: 90,
    DateRange.LAST_YEAR: 365,
}

DEFAULT_RANGE = DateRange.LAST_7_DAYS


def parse_range(token: str | DateRange | None) -> DateRange:
    """Return the DateRange for a token, falling back to the last 7 days."""
    if isinstance(token, DateRange):
        return token
    try:
        return DateRange(token)
    except ValueError:
        logger.debug(f"Unknown date range {token!r}, using {DEFAULT_RANGE.value}")
        return DEFAULT_RANGE


def today_utc() -> date:
    return datetime.now(UTC).date()


def resolve_cutoff(token: str | DateRange | None, today: date | None = None) -> date:
    """
    Resolve a date-range token to the earliest date it includes.

    Args:
        token: One of "7days", "30days", "90days", "1year". Anything else
            is treated as "7days".
        today: Reference date (default: current UTC date)

    Returns:
        today minus the range length in days

    Example:
        resolve_cutoff("90days", today=date(2025, 6, 30))  # date(2025, 4, 1)
    """
    today = today or today_utc()
    return today - timedelta(days=parse_range(token).days)
