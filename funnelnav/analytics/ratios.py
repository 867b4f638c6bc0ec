"""Division helpers shared by every report: zero denominators give 0."""

from __future__ import annotations


def safe_ratio(numerator: float | None, denominator: float | None, digits: int | None = 2) -> float:
    """Return numerator / denominator, or 0.0 when the denominator is 0 or missing."""
    if not denominator or not numerator:
        return 0.0
    result = numerator / denominator
    return round(result, digits) if digits is not None else result


def safe_percentage(numerator: float | None, denominator: float | None, digits: int = 2) -> float:
    """Return numerator / denominator * 100 rounded, or 0.0 on a zero denominator."""
    if not denominator or not numerator:
        return 0.0
    return round(numerator / denominator * 100, digits)
