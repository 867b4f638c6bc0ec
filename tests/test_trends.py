"""Tests for conversion trends and performance comparison."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from funnelnav.analytics.trends import compute_performance, compute_trends, growth_rate
from funnelnav.store.base import EventStore

CUTOFF = date(2025, 3, 24)
TODAY = date(2025, 3, 31)


class TestComputeTrends:
    """Test trend reports."""

    def test_daily(self, sample_store):
        """Test one point per day, oldest first."""
        report = compute_trends(sample_store, CUTOFF)
        assert report.granularity == "day"
        assert [p.period for p in report.periods] == ["2025-03-28", "2025-03-29", "2025-03-30"]
        last = report.periods[-1]
        assert (last.conversions, last.revenue, last.avg_order_value, last.unique_customers) == (
            2, 125.0, 62.5, 2,
        )

    def test_monthly(self, sample_store):
        """Test month labels."""
        report = compute_trends(sample_store, CUTOFF, "month")
        assert [p.period for p in report.periods] == ["2025-03"]
        assert report.periods[0].revenue == 375.0

    def test_unknown_granularity_falls_back_to_day(self):
        """Test unsupported groupings query by day."""
        store = MagicMock(spec=EventStore)
        store.conversion_trend.return_value = []
        report = compute_trends(store, CUTOFF, "hour")
        assert report.granularity == "day"
        store.conversion_trend.assert_called_once_with(CUTOFF, "day")

    def test_sorts_store_rows(self):
        """Test periods are ordered even if the store returns them unordered."""
        store = MagicMock(spec=EventStore)
        store.conversion_trend.return_value = [
            {"period": "2025-W02", "conversions": 1, "revenue": 5, "avg_order_value": 5, "unique_customers": 1},
            {"period": "2025-W01", "conversions": 2, "revenue": 8, "avg_order_value": 4, "unique_customers": 2},
        ]
        report = compute_trends(store, CUTOFF, "week")
        assert [p.period for p in report.periods] == ["2025-W01", "2025-W02"]


class TestPerformance:
    """Test week-over-week comparison."""

    def test_growth_rate(self):
        """Test growth against the previous value."""
        assert growth_rate(150, 100) == 50.0
        assert growth_rate(50, 100) == -50.0
        assert growth_rate(10, 0) == 0

    def test_windows(self):
        """Test the current and previous windows."""
        store = MagicMock(spec=EventStore)
        store.conversion_totals.side_effect = [
            {"revenue": 300.0, "conversions": 6},
            {"revenue": 200.0, "conversions": 8},
        ]
        report = compute_performance(store, TODAY)

        current_call, previous_call = store.conversion_totals.call_args_list
        assert current_call.args == (date(2025, 3, 24), TODAY)
        assert previous_call.args == (date(2025, 3, 17), date(2025, 3, 23))
        assert report.revenue_growth == 50.0
        assert report.conversion_growth == -25.0
        assert report.previous_period.end == date(2025, 3, 23)

    def test_sample_store(self, sample_store):
        """Test no previous-week activity gives 0 growth."""
        report = compute_performance(sample_store, TODAY)
        assert report.current_period.revenue == 375.0
        assert report.current_period.conversions == 4
        assert report.previous_period.conversions == 0
        assert report.revenue_growth == 0

    def test_to_dict(self, sample_store):
        """Test window dates serialize as ISO strings."""
        data = compute_performance(sample_store, TODAY).to_dict()
        assert data["current_period"]["start"] == "2025-03-24"
        assert data["previous_period"]["end"] == "2025-03-23"
        assert set(data) == {"current_period", "previous_period", "revenue_growth", "conversion_growth"}


@pytest.mark.parametrize("granularity", ["day", "week", "month"])
def test_granularity_recorded(sample_store, granularity):
    """Test the report records the granularity used."""
    assert compute_trends(sample_store, CUTOFF, granularity).granularity == granularity
