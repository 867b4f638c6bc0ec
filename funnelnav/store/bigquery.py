"""
BigQueryEventStore - EventStore over BigQuery tables.

Provides:
- Parameterized aggregate queries for every analytics read
- Read-only validation of each statement
- Query failures surfaced as StoreQueryError
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from google.api_core import exceptions as google_exceptions
from google.cloud import bigquery
from pydantic import BaseModel

from funnelnav.conversions.schema import MetricName, MetricType
from funnelnav.store.base import GROUPABLE_FIELDS, EventStore, normalize_names
from funnelnav.store.exceptions import StoreQueryError
from funnelnav.store.validation import QueryValidator

logger = logging.getLogger(__name__)

# FORMAT_DATE patterns per trend granularity (%G-W%V is the ISO week)
PERIOD_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%G-W%V",
    "month": "%Y-%m",
}


class StoreConfig(BaseModel):
    """Configuration for the BigQuery event store."""

    project_id: str | None = None
    dataset: str = "funnelnav"
    location: str = "US"
    events_table: str = "metric_events"
    conversions_table: str = "conversions"
    max_results: int = 10_000
    timeout: int = 300  # 5 minutes

    @classmethod
    def from_env(cls) -> StoreConfig:
        """Load configuration from environment variables."""
        return cls(
            project_id=os.getenv("FUNNELNAV_PROJECT_ID") or os.getenv("GCP_PROJECT_ID"),
            dataset=os.getenv("FUNNELNAV_DATASET", "funnelnav"),
            location=os.getenv("FUNNELNAV_BQ_LOCATION", "US"),
        )


@dataclass
class QueryResult:
    """Result of a BigQuery query."""

    rows: list[dict[str, Any]]
    total_rows: int
    bytes_processed: int
    cache_hit: bool


class BigQueryEventStore(EventStore):
    """
    Event store reading the metric event and conversion tables in BigQuery.

    Example:
        store = BigQueryEventStore(StoreConfig(project_id="acme-analytics"))
        sent = store.sum_value("whatsapp", "message_sent", since=date(2025, 1, 1))
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        client: bigquery.Client | None = None,
    ):
        self.config = config or StoreConfig.from_env()
        QueryValidator.sanitize_identifier(self.config.dataset)
        QueryValidator.sanitize_identifier(self.config.events_table)
        QueryValidator.sanitize_identifier(self.config.conversions_table)
        if self.config.project_id:
            QueryValidator.validate_project_id(self.config.project_id)
        self._client = client

    @property
    def client(self) -> bigquery.Client:
        """Lazy initialization of BigQuery client."""
        if self._client is None:
            self._client = bigquery.Client(
                project=self.config.project_id,
                location=self.config.location,
            )
        return self._client

    def _table(self, table: str) -> str:
        project_id = self.config.project_id or self.client.project
        return f"{project_id}.{self.config.dataset}.{table}"

    @property
    def events_table(self) -> str:
        """Fully-qualified metric events table."""
        return self._table(self.config.events_table)

    @property
    def conversions_table(self) -> str:
        """Fully-qualified conversions table."""
        return self._table(self.config.conversions_table)

    def query(
        self,
        sql: str,
        params: list[Any] | None = None,
        max_results: int | None = None,
    ) -> QueryResult:
        """
        Execute a validated, parameterized query.

        Args:
            sql: SQL query string
            params: BigQuery query parameters
            max_results: Maximum rows to return (default: config.max_results)

        Returns:
            QueryResult with rows and job metadata

        Raises:
            ValueError: If the statement is not read-only
            StoreQueryError: If BigQuery rejects or fails the query
        """
        QueryValidator.validate(sql)

        job_config = bigquery.QueryJobConfig(query_parameters=params or [])
        try:
            query_job = self.client.query(sql, job_config=job_config)
            result = query_job.result(
                max_results=max_results or self.config.max_results,
                timeout=self.config.timeout,
            )
            rows = [dict(row.items()) for row in result]
        except (google_exceptions.GoogleAPIError, TimeoutError) as e:
            raise StoreQueryError(f"Event store query failed: {e}") from e

        logger.debug(f"Query returned {len(rows)} rows")
        return QueryResult(
            rows=rows,
            total_rows=result.total_rows or len(rows),
            bytes_processed=query_job.total_bytes_processed or 0,
            cache_hit=query_job.cache_hit or False,
        )

    def sum_value(
        self,
        metric_type: str,
        metric_names: str | Sequence[str],
        since: date,
        source_type: str | None = None,
    ) -> float:
        sql = f"""
            SELECT COALESCE(SUM(metric_value), 0) AS total
            FROM `{self.events_table}`
            WHERE metric_type = @metric_type
              AND metric_name IN UNNEST(@metric_names)
              AND metric_date >= @since
        """
        params = [
            bigquery.ScalarQueryParameter("metric_type", "STRING", normalize_names(metric_type)[0]),
            bigquery.ArrayQueryParameter("metric_names", "STRING", normalize_names(metric_names)),
            bigquery.ScalarQueryParameter("since", "DATE", since),
        ]
        if source_type:
            sql += " AND source_type = @source_type"
            params.append(bigquery.ScalarQueryParameter("source_type", "STRING", source_type))

        rows = self.query(sql, params).rows
        return float(rows[0]["total"] or 0) if rows else 0.0

    def group_conversions(self, group_by: str, since: date) -> list[dict[str, Any]]:
        if group_by not in GROUPABLE_FIELDS:
            raise StoreQueryError(f"Cannot group conversions by: {group_by}")

        sql = f"""
            SELECT
                {group_by} AS group_key,
                COUNT(*) AS conversion_count,
                SUM(conversion_value) AS total_revenue,
                AVG(conversion_value) AS avg_revenue
            FROM `{self.conversions_table}`
            WHERE DATE(conversion_date) >= @since
            GROUP BY group_key
            ORDER BY total_revenue DESC
        """
        params = [bigquery.ScalarQueryParameter("since", "DATE", since)]
        rows = self.query(sql, params).rows
        return [
            {
                "key": row["group_key"],
                "conversion_count": row["conversion_count"],
                "total_revenue": row["total_revenue"],
                "avg_revenue": row["avg_revenue"],
            }
            for row in rows
        ]

    def earliest_event(
        self,
        metric_type: str,
        customer_id: str,
        at_or_before: datetime,
    ) -> datetime | None:
        sql = f"""
            SELECT MIN(created_at) AS first_interaction
            FROM `{self.events_table}`
            WHERE metric_type = @metric_type
              AND customer_id = @customer_id
              AND created_at <= @at_or_before
        """
        params = [
            bigquery.ScalarQueryParameter("metric_type", "STRING", normalize_names(metric_type)[0]),
            bigquery.ScalarQueryParameter("customer_id", "STRING", customer_id),
            bigquery.ScalarQueryParameter("at_or_before", "TIMESTAMP", at_or_before),
        ]
        rows = self.query(sql, params).rows
        return rows[0]["first_interaction"] if rows else None

    def conversion_first_touches(self, metric_type: str, since: date) -> list[dict[str, Any]]:
        sql = f"""
            SELECT
                c.customer_id,
                c.conversion_date,
                (
                    SELECT MIN(a.created_at)
                    FROM `{self.events_table}` a
                    WHERE a.customer_id = c.customer_id
                      AND a.metric_type = @metric_type
                      AND a.created_at <= c.conversion_date
                ) AS first_interaction
            FROM `{self.conversions_table}` c
            WHERE DATE(c.conversion_date) >= @since
              AND c.customer_id IS NOT NULL
        """
        params = [
            bigquery.ScalarQueryParameter("metric_type", "STRING", normalize_names(metric_type)[0]),
            bigquery.ScalarQueryParameter("since", "DATE", since),
        ]
        return self.query(sql, params).rows

    def group_by_customer(self, since: date) -> list[dict[str, Any]]:
        sql = f"""
            SELECT
                customer_id,
                COUNT(payment_id) AS total_payments,
                SUM(conversion_value) AS total_revenue,
                AVG(conversion_value) AS avg_order_value,
                MIN(conversion_date) AS first_purchase,
                MAX(conversion_date) AS last_purchase
            FROM `{self.conversions_table}`
            WHERE DATE(conversion_date) >= @since
              AND customer_id IS NOT NULL
            GROUP BY customer_id
            HAVING COUNT(payment_id) > 0
            ORDER BY total_revenue DESC
        """
        params = [bigquery.ScalarQueryParameter("since", "DATE", since)]
        return self.query(sql, params).rows

    def campaign_totals(self, since: date) -> list[dict[str, Any]]:
        # Aggregate each side before joining so conversions are not
        # multiplied by the number of campaign event rows
        sql = f"""
            WITH campaign_events AS (
                SELECT
                    source_id AS campaign_id,
                    SUM(IF(metric_name = @sent, metric_value, 0)) AS messages_sent,
                    SUM(IF(metric_name = @click, metric_value, 0)) AS clicks
                FROM `{self.events_table}`
                WHERE metric_type = @campaign
                  AND metric_date >= @since
                  AND source_id IS NOT NULL
                GROUP BY source_id
            ),
            campaign_conversions AS (
                SELECT
                    source_id,
                    COUNT(payment_id) AS conversions,
                    SUM(conversion_value) AS revenue
                FROM `{self.conversions_table}`
                WHERE DATE(conversion_date) >= @since
                  AND source_id IS NOT NULL
                GROUP BY source_id
            )
            SELECT
                e.campaign_id,
                e.messages_sent,
                e.clicks,
                COALESCE(c.conversions, 0) AS conversions,
                COALESCE(c.revenue, 0) AS revenue
            FROM campaign_events e
            LEFT JOIN campaign_conversions c ON e.campaign_id = c.source_id
        """
        params = [
            bigquery.ScalarQueryParameter("campaign", "STRING", MetricType.CAMPAIGN.value),
            bigquery.ScalarQueryParameter("sent", "STRING", MetricName.SENT.value),
            bigquery.ScalarQueryParameter("click", "STRING", MetricName.CLICK.value),
            bigquery.ScalarQueryParameter("since", "DATE", since),
        ]
        return self.query(sql, params).rows

    def conversion_trend(self, since: date, granularity: str = "day") -> list[dict[str, Any]]:
        period_format = PERIOD_FORMATS.get(granularity, PERIOD_FORMATS["day"])
        sql = f"""
            SELECT
                FORMAT_DATE(@period_format, DATE(conversion_date)) AS period,
                COUNT(*) AS conversions,
                SUM(conversion_value) AS revenue,
                AVG(conversion_value) AS avg_order_value,
                COUNT(DISTINCT customer_id) AS unique_customers
            FROM `{self.conversions_table}`
            WHERE DATE(conversion_date) >= @since
            GROUP BY period
            ORDER BY period ASC
        """
        params = [
            bigquery.ScalarQueryParameter("period_format", "STRING", period_format),
            bigquery.ScalarQueryParameter("since", "DATE", since),
        ]
        return self.query(sql, params).rows

    def conversion_totals(self, start: date, end: date) -> dict[str, float]:
        sql = f"""
            SELECT
                COALESCE(SUM(conversion_value), 0) AS revenue,
                COUNT(*) AS conversions
            FROM `{self.conversions_table}`
            WHERE DATE(conversion_date) BETWEEN @start_date AND @end_date
        """
        params = [
            bigquery.ScalarQueryParameter("start_date", "DATE", start),
            bigquery.ScalarQueryParameter("end_date", "DATE", end),
        ]
        rows = self.query(sql, params).rows
        if not rows:
            return {"revenue": 0.0, "conversions": 0}
        return {
            "revenue": float(rows[0]["revenue"] or 0),
            "conversions": int(rows[0]["conversions"] or 0),
        }

    def distinct_customers(self, metric_type: str, since: date) -> int:
        sql = f"""
            SELECT COUNT(DISTINCT customer_id) AS customers
            FROM `{self.events_table}`
            WHERE metric_type = @metric_type
              AND metric_date >= @since
              AND customer_id IS NOT NULL
        """
        params = [
            bigquery.ScalarQueryParameter("metric_type", "STRING", normalize_names(metric_type)[0]),
            bigquery.ScalarQueryParameter("since", "DATE", since),
        ]
        rows = self.query(sql, params).rows
        return int(rows[0]["customers"] or 0) if rows else 0

    def daily_totals(
        self,
        metric_type: str,
        metric_names: str | Sequence[str],
        since: date,
    ) -> list[dict[str, Any]]:
        sql = f"""
            SELECT metric_date AS day, SUM(metric_value) AS total
            FROM `{self.events_table}`
            WHERE metric_type = @metric_type
              AND metric_name IN UNNEST(@metric_names)
              AND metric_date >= @since
            GROUP BY day
            ORDER BY day ASC
        """
        params = [
            bigquery.ScalarQueryParameter("metric_type", "STRING", normalize_names(metric_type)[0]),
            bigquery.ArrayQueryParameter("metric_names", "STRING", normalize_names(metric_names)),
            bigquery.ScalarQueryParameter("since", "DATE", since),
        ]
        return self.query(sql, params).rows
