"""Shared pytest fixtures for FunnelNav."""

from datetime import UTC, date, datetime
from unittest.mock import MagicMock, patch

import pytest

from funnelnav.analytics.config import AnalyticsConfig
from funnelnav.analytics.service import ConversionAnalytics
from funnelnav.conversions.schema import Conversion, MetricEvent
from funnelnav.store.memory import InMemoryEventStore

TODAY = date(2025, 3, 31)


@pytest.fixture
def today():
    """Fixed reference date for cutoffs."""
    return TODAY


@pytest.fixture
def mock_bigquery_client():
    """Mock google.cloud.bigquery.Client for testing."""
    with patch("google.cloud.bigquery.Client") as mock:
        client = MagicMock()
        client.project = "test-project"
        mock.return_value = client
        yield client


@pytest.fixture
def sample_events():
    """Funnel, interaction and campaign events inside the last 7 days."""

    def at(day, hour):
        return datetime(2025, 3, day, hour, 0, tzinfo=UTC)

    return [
        MetricEvent("whatsapp", "message_sent", date(2025, 3, 28), value=100, source_type="whatsapp",
                    customer_id="C-001", created_at=at(28, 9)),
        MetricEvent("whatsapp", "message_delivered", date(2025, 3, 28), value=80, source_type="whatsapp",
                    created_at=at(28, 9)),
        MetricEvent("interaction", "click", date(2025, 3, 28), value=20, source_type="whatsapp",
                    customer_id="C-001", created_at=at(28, 10)),
        MetricEvent("interaction", "reply", date(2025, 3, 29), value=5, source_type="whatsapp",
                    customer_id="C-002", created_at=at(29, 10)),
        MetricEvent("payment", "conversion", date(2025, 3, 29), value=4, source_type="whatsapp",
                    created_at=at(29, 12)),
        MetricEvent("payment", "failure", date(2025, 3, 29), value=6, source_type="whatsapp",
                    created_at=at(29, 12)),
        MetricEvent("whatsapp", "message_sent", date(2025, 3, 29), value=1, source_type="whatsapp",
                    customer_id="C-002", created_at=at(29, 8)),
        MetricEvent("campaign", "sent", date(2025, 3, 28), value=100, source_id="CAMP-A",
                    created_at=at(28, 9)),
        MetricEvent("campaign", "click", date(2025, 3, 28), value=20, source_id="CAMP-A",
                    created_at=at(28, 11)),
        MetricEvent("campaign", "sent", date(2025, 3, 28), value=50, source_id="CAMP-B",
                    created_at=at(28, 9)),
        MetricEvent("campaign", "click", date(2025, 3, 29), value=5, source_id="CAMP-B",
                    created_at=at(29, 11)),
        # Outside every range but 1year
        MetricEvent("whatsapp", "message_sent", date(2024, 12, 1), value=1000, source_type="whatsapp",
                    created_at=datetime(2024, 12, 1, 9, 0, tzinfo=UTC)),
    ]


@pytest.fixture
def sample_conversions():
    """Conversions across two customers, two sources and two gateways."""
    return [
        Conversion(payment_id="PAY-1", customer_id="C-001", source_type="whatsapp", source_id="CAMP-A",
                   value=200.0, gateway="paystack",
                   conversion_date=datetime(2025, 3, 28, 11, 0, tzinfo=UTC)),
        Conversion(payment_id="PAY-2", customer_id="C-001", source_type="whatsapp", source_id="CAMP-A",
                   value=100.0, gateway="paystack",
                   conversion_date=datetime(2025, 3, 30, 9, 0, tzinfo=UTC)),
        Conversion(payment_id="PAY-3", customer_id="C-002", source_type="direct", source_id="CAMP-B",
                   value=50.0, gateway="flutterwave",
                   conversion_date=datetime(2025, 3, 29, 14, 0, tzinfo=UTC)),
        Conversion(payment_id="PAY-4", customer_id="C-003", source_type="direct",
                   value=25.0, gateway="paystack",
                   conversion_date=datetime(2025, 3, 30, 16, 0, tzinfo=UTC)),
    ]


@pytest.fixture
def sample_store(sample_events, sample_conversions):
    """In-memory store loaded with the sample events and conversions."""
    return InMemoryEventStore(events=sample_events, conversions=sample_conversions)


@pytest.fixture
def analytics(sample_store, today):
    """Analytics service over the sample store with analytics enabled."""
    return ConversionAnalytics(
        store=sample_store,
        config=AnalyticsConfig(premium_enabled=True),
        today=lambda: today,
    )
