"""Tests for BigQueryEventStore."""

from datetime import UTC, date, datetime
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as google_exceptions

from funnelnav.store.bigquery import BigQueryEventStore, QueryResult, StoreConfig
from funnelnav.store.exceptions import StoreError, StoreQueryError

SINCE = date(2025, 3, 24)


def make_store(rows=None):
    """Build a store over a mocked client returning `rows`."""
    client = MagicMock()
    job = MagicMock()
    job.result.return_value = _Result(rows or [])
    job.total_bytes_processed = 1024
    job.cache_hit = False
    client.query.return_value = job
    store = BigQueryEventStore(StoreConfig(project_id="test-project"), client=client)
    return store, client


class _Result(list):
    def __init__(self, rows):
        super().__init__(dict(r) for r in rows)
        self.total_rows = len(rows)


def sent_sql(client):
    return client.query.call_args.args[0]


def sent_params(client):
    job_config = client.query.call_args.kwargs["job_config"]
    return {p.name: p for p in job_config.query_parameters}


class TestStoreConfig:
    """Test suite for StoreConfig."""

    def test_default_values(self):
        """Test StoreConfig default values."""
        config = StoreConfig()
        assert config.project_id is None
        assert config.dataset == "funnelnav"
        assert config.events_table == "metric_events"
        assert config.conversions_table == "conversions"
        assert config.timeout == 300

    def test_from_env(self, monkeypatch):
        """Test StoreConfig.from_env() reads FunnelNav variables."""
        monkeypatch.setenv("FUNNELNAV_PROJECT_ID", "shop-analytics")
        monkeypatch.setenv("FUNNELNAV_DATASET", "chatshop")
        monkeypatch.setenv("FUNNELNAV_BQ_LOCATION", "EU")

        config = StoreConfig.from_env()
        assert config.project_id == "shop-analytics"
        assert config.dataset == "chatshop"
        assert config.location == "EU"

    def test_from_env_gcp_fallback(self, monkeypatch):
        """Test GCP_PROJECT_ID is used when FUNNELNAV_PROJECT_ID is unset."""
        monkeypatch.delenv("FUNNELNAV_PROJECT_ID", raising=False)
        monkeypatch.setenv("GCP_PROJECT_ID", "gcp-project")

        assert StoreConfig.from_env().project_id == "gcp-project"


class TestBigQueryEventStore:
    """Test client setup and query execution."""

    def test_invalid_dataset_rejected(self):
        """Test dataset names are sanitized."""
        with pytest.raises(ValueError, match="Invalid identifier"):
            BigQueryEventStore(StoreConfig(project_id="test-project", dataset="x; DROP"))

    def test_invalid_project_rejected(self):
        """Test malformed project IDs are rejected."""
        with pytest.raises(ValueError, match="Invalid project ID"):
            BigQueryEventStore(StoreConfig(project_id="Bad_Project"))

    @patch("funnelnav.store.bigquery.bigquery.Client")
    def test_client_lazy_initialization(self, mock_bq_client):
        """Test the BigQuery client is created on first use."""
        store = BigQueryEventStore(StoreConfig(project_id="test-project", location="EU"))
        assert store._client is None

        _ = store.client

        mock_bq_client.assert_called_once_with(project="test-project", location="EU")

    def test_table_names(self):
        """Test fully-qualified table names."""
        store, _ = make_store()
        assert store.events_table == "test-project.funnelnav.metric_events"
        assert store.conversions_table == "test-project.funnelnav.conversions"

    def test_query_returns_result(self):
        """Test query() wraps rows and job metadata."""
        store, _ = make_store([{"total": 5}])
        result = store.query("SELECT 5 AS total")
        assert isinstance(result, QueryResult)
        assert result.rows == [{"total": 5}]
        assert result.bytes_processed == 1024
        assert result.cache_hit is False

    def test_query_rejects_writes(self):
        """Test destructive statements never reach BigQuery."""
        store, client = make_store()
        with pytest.raises(ValueError, match="DELETE"):
            store.query("DELETE FROM conversions WHERE TRUE")
        client.query.assert_not_called()

    def test_query_wraps_google_errors(self):
        """Test API errors surface as StoreQueryError."""
        store, client = make_store()
        client.query.side_effect = google_exceptions.BadRequest("Unrecognized name: foo")

        with pytest.raises(StoreQueryError, match="Unrecognized name") as exc_info:
            store.query("SELECT foo")
        assert isinstance(exc_info.value, StoreError)
        assert isinstance(exc_info.value.__cause__, google_exceptions.BadRequest)


class TestContractQueries:
    """Test the SQL and parameters behind each contract method."""

    def test_sum_value(self):
        """Test sum_value parameters and result."""
        store, client = make_store([{"total": 42.0}])

        total = store.sum_value("interaction", ["click", "reply"], SINCE, source_type="whatsapp")

        assert total == 42.0
        params = sent_params(client)
        assert params["metric_type"].value == "interaction"
        assert params["metric_names"].values == ["click", "reply"]
        assert params["since"].value == SINCE
        assert params["source_type"].value == "whatsapp"
        assert "source_type = @source_type" in sent_sql(client)

    def test_sum_value_without_source_type(self):
        """Test the source filter is omitted when not given."""
        store, client = make_store([{"total": None}])
        assert store.sum_value("whatsapp", "message_sent", SINCE) == 0.0
        assert "source_type" not in sent_params(client)

    def test_group_conversions(self):
        """Test group rows are renamed to the contract keys."""
        store, client = make_store([
            {"group_key": "paystack", "conversion_count": 3, "total_revenue": 325.0, "avg_revenue": 108.3},
        ])
        rows = store.group_conversions("gateway", SINCE)
        assert rows == [{"key": "paystack", "conversion_count": 3, "total_revenue": 325.0, "avg_revenue": 108.3}]
        assert "gateway AS group_key" in sent_sql(client)

    def test_group_conversions_rejects_unknown_column(self):
        """Test only whitelisted columns are interpolated."""
        store, client = make_store()
        with pytest.raises(StoreQueryError):
            store.group_conversions("1; DROP TABLE conversions", SINCE)
        client.query.assert_not_called()

    def test_earliest_event(self):
        """Test earliest_event returns the MIN(created_at) value."""
        first = datetime(2025, 3, 28, 9, 0, tzinfo=UTC)
        store, client = make_store([{"first_interaction": first}])
        moment = datetime(2025, 3, 30, tzinfo=UTC)

        assert store.earliest_event("whatsapp", "C-001", moment) == first
        params = sent_params(client)
        assert params["customer_id"].value == "C-001"
        assert params["at_or_before"].type_ == "TIMESTAMP"

    def test_campaign_totals_aggregates_before_join(self):
        """Test both sides are grouped before the LEFT JOIN."""
        store, client = make_store([
            {"campaign_id": "CAMP-A", "messages_sent": 100, "clicks": 20, "conversions": 5, "revenue": 500},
        ])
        rows = store.campaign_totals(SINCE)
        sql = sent_sql(client)
        assert rows[0]["campaign_id"] == "CAMP-A"
        assert "WITH campaign_events AS" in sql
        assert "LEFT JOIN campaign_conversions" in sql
        params = sent_params(client)
        assert params["campaign"].value == "campaign"
        assert params["sent"].value == "sent"
        assert params["click"].value == "click"

    @pytest.mark.parametrize(
        "granularity,expected",
        [("day", "%Y-%m-%d"), ("week", "%G-W%V"), ("month", "%Y-%m"), ("hour", "%Y-%m-%d")],
    )
    def test_conversion_trend_formats(self, granularity, expected):
        """Test period formats per granularity, unknown falling back to day."""
        store, client = make_store()
        store.conversion_trend(SINCE, granularity)
        assert sent_params(client)["period_format"].value == expected

    def test_conversion_totals(self):
        """Test totals are coerced to numbers."""
        store, client = make_store([{"revenue": None, "conversions": 0}])
        assert store.conversion_totals(SINCE, date(2025, 3, 31)) == {"revenue": 0.0, "conversions": 0}
        assert "BETWEEN @start_date AND @end_date" in sent_sql(client)

    def test_distinct_customers(self):
        """Test the distinct customer count query."""
        store, client = make_store([{"customers": 7}])
        assert store.distinct_customers("interaction", SINCE) == 7
        assert "COUNT(DISTINCT customer_id)" in sent_sql(client)
        assert sent_params(client)["metric_type"].value == "interaction"

    def test_daily_totals(self):
        """Test per-day sums are grouped on metric_date."""
        store, client = make_store([{"day": date(2025, 3, 28), "total": 20.0}])
        rows = store.daily_totals("interaction", ["click", "reply"], SINCE)
        assert rows == [{"day": date(2025, 3, 28), "total": 20.0}]
        assert "GROUP BY day" in sent_sql(client)
        assert sent_params(client)["metric_names"].values == ["click", "reply"]
