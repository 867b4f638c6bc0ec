"""Tests for the attribution aggregator."""

from datetime import UTC, date, datetime

import pytest

from funnelnav.analytics.attribution import compute_attribution, to_rows
from funnelnav.conversions.schema import Conversion
from funnelnav.store.memory import InMemoryEventStore

CUTOFF = date(2025, 3, 24)


class TestToRows:
    """Test row conversion."""

    def test_sorted_by_revenue_descending(self):
        """Test highest revenue first."""
        rows = to_rows([
            {"key": "sms", "conversion_count": 1, "total_revenue": 10, "avg_revenue": 10},
            {"key": "whatsapp", "conversion_count": 2, "total_revenue": 300, "avg_revenue": 150},
            {"key": "direct", "conversion_count": 3, "total_revenue": 75, "avg_revenue": 25},
        ])
        assert [r.key for r in rows] == ["whatsapp", "direct", "sms"]

    def test_null_aggregates_become_zero(self):
        """Test missing sums are coerced to 0."""
        (row,) = to_rows([{"key": None, "conversion_count": None, "total_revenue": None, "avg_revenue": None}])
        assert row.conversion_count == 0
        assert row.total_revenue == 0.0


class TestComputeAttribution:
    """Test attribution over the sample store."""

    def test_by_source(self, sample_store):
        """Test source grouping."""
        report = compute_attribution(sample_store, CUTOFF)
        assert [(r.key, r.conversion_count, r.total_revenue, r.avg_revenue) for r in report.by_source] == [
            ("whatsapp", 2, 300.0, 150.0),
            ("direct", 2, 75.0, 37.5),
        ]

    def test_by_gateway(self, sample_store):
        """Test gateway grouping."""
        report = compute_attribution(sample_store, CUTOFF)
        assert [r.key for r in report.by_gateway] == ["paystack", "flutterwave"]
        assert report.by_gateway[0].avg_revenue == pytest.approx(108.3333, rel=1e-4)

    def test_groupings_partition_revenue(self, sample_store):
        """Test each grouping adds up to total revenue."""
        report = compute_attribution(sample_store, CUTOFF)
        total = sum(c.value for c in sample_store.conversions)
        assert sum(r.total_revenue for r in report.by_source) == pytest.approx(total)
        assert sum(r.total_revenue for r in report.by_gateway) == pytest.approx(total)
        assert sum(r.conversion_count for r in report.by_source) == len(sample_store.conversions)

    def test_cutoff_filters_conversions(self):
        """Test conversions before the cutoff are excluded."""
        store = InMemoryEventStore(conversions=[
            Conversion(payment_id="OLD", gateway="paystack", value=999,
                       conversion_date=datetime(2025, 1, 1, tzinfo=UTC)),
            Conversion(payment_id="NEW", gateway="paystack", value=1,
                       conversion_date=datetime(2025, 3, 24, 0, 0, tzinfo=UTC)),
        ])
        report = compute_attribution(store, CUTOFF)
        assert report.by_gateway[0].total_revenue == 1.0

    def test_empty(self):
        """Test no conversions gives empty tables."""
        report = compute_attribution(InMemoryEventStore(), CUTOFF)
        assert report.to_dict() == {"by_source": [], "by_gateway": []}
