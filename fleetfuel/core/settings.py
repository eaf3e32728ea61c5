from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Args:
        environment: Deployment environment, e.g. 'dev', 'staging', 'prod'.
        app_name: Human-readable application name.
        api_version: API version prefix.
        database_url: SQLAlchemy async DSN, or 'memory://' for in-process stores.
        sentry_dsn: Optional Sentry DSN for error reporting.
        currency_symbol: Single-character prefix used when rendering amounts.
        budget_timezone: IANA timezone whose calendar months bound monthly usage.
        monitor_threshold_percent: Usage percentage that raises a monitoring alert.
        critical_threshold_percent: Usage percentage that raises a nearly-exceeded alert.
        pre_action_warn_ratio: Fraction of the limit above which a planned spend warns.
        max_budget: Upper bound accepted when a budget or fuel limit is edited.
    """

    environment: Literal["dev", "staging", "prod"] = Field(default="dev")
    app_name: str = Field(default="FleetFuel Budget Service")
    api_version: str = Field(default="v1")

    database_url: str = Field(default="sqlite+aiosqlite:///./fleetfuel.db")

    sentry_dsn: str | None = None

    currency_symbol: str = Field(default="E", min_length=1, max_length=1)
    budget_timezone: str = Field(default="UTC")

    monitor_threshold_percent: Decimal = Field(default=Decimal("75"))
    critical_threshold_percent: Decimal = Field(default=Decimal("90"))
    pre_action_warn_ratio: Decimal = Field(default=Decimal("0.9"))
    max_budget: Decimal = Field(default=Decimal("100000"))

    # Seconds a client should wait before retrying after a store failure
    store_retry_after_s: int = Field(default=5)

    allowed_origins: list[str] = Field(default=["*"])

    class Config:
        env_prefix = "FLEETFUEL_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of Settings."""

    return Settings()  # type: ignore[call-arg]
