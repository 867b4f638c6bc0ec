"""Analytics configuration."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

TRUTHY = {"1", "true", "yes", "on"}


class AnalyticsConfig(BaseModel):
    """Configuration for report computation.

    Attributes:
        premium_enabled: Whether analytics reports are available at all.
        default_campaign_limit: Campaigns returned by top_campaigns by default.
        report_campaign_limit: Campaigns included in a generated campaign report.
        cache_ttl: Seconds store results are cached for (0 disables caching).
        cache_maxsize: Most store results held in the cache.
        per_minute_limit: Store queries allowed per minute.
        per_hour_limit: Store queries allowed per hour.
    """

    premium_enabled: bool = True
    default_campaign_limit: int = Field(default=10, gt=0)
    report_campaign_limit: int = Field(default=50, gt=0)
    cache_ttl: int = Field(default=300, ge=0)
    cache_maxsize: int = Field(default=256, gt=0)
    per_minute_limit: int = Field(default=240, gt=0)
    per_hour_limit: int = Field(default=10_000, gt=0)

    @classmethod
    def from_env(cls) -> AnalyticsConfig:
        """Create configuration from environment variables.

        Environment variables:
            FUNNELNAV_PREMIUM: Enable analytics (default: true)
            FUNNELNAV_CACHE_TTL: Store cache TTL in seconds (default: 300)
            FUNNELNAV_CACHE_MAXSIZE: Store cache capacity (default: 256)
            FUNNELNAV_RATE_PER_MINUTE: Per-minute query budget (default: 240)
            FUNNELNAV_RATE_PER_HOUR: Per-hour query budget (default: 10000)
        """
        return cls(
            premium_enabled=os.getenv("FUNNELNAV_PREMIUM", "true").strip().lower() in TRUTHY,
            cache_ttl=int(os.getenv("FUNNELNAV_CACHE_TTL", "300")),
            cache_maxsize=int(os.getenv("FUNNELNAV_CACHE_MAXSIZE", "256")),
            per_minute_limit=int(os.getenv("FUNNELNAV_RATE_PER_MINUTE", "240")),
            per_hour_limit=int(os.getenv("FUNNELNAV_RATE_PER_HOUR", "10000")),
        )
