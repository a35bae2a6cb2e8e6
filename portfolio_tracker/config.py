# portfolio_tracker/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- DATABASE_URL: Key-value store location (SQLite file by default)
- MONTH_ARITHMETIC: How elapsed months are measured for FD/RD accrual

Environment-specific behavior:
- test: Uses an in-memory SQLite database unless DATABASE_URL is set
- development/production: Uses DATABASE_URL or the local SQLite file

Usage:
    from portfolio_tracker.config import settings

    if settings.month_arithmetic == "calendar":
        ...
"""
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - DATABASE_URL: SQLAlchemy URL of the key-value store
        - MONTH_ARITHMETIC: "average" (30.44-day months) or "calendar"

    Quote provider settings:
        - QUOTE_TIMEOUT_SECONDS: HTTP timeout for quote providers (default: 10)
        - QUOTE_REFRESH_INTERVAL_SECONDS: Refresh period for open views (default: 60)
        - STOCK_EXCHANGE_SUFFIX: Yahoo suffix appended to stock symbols (default: ".NS")
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy URL for the key-value store"
    )

    # =========================================================================
    # VALUATION
    # =========================================================================
    month_arithmetic: Literal["average", "calendar"] = Field(
        default="average",
        description=(
            "Elapsed-month measure for deposit accrual: 'average' divides the "
            "elapsed time by a 30.44-day month, 'calendar' counts calendar months"
        )
    )

    # =========================================================================
    # QUOTE PROVIDERS
    # =========================================================================
    quote_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="HTTP timeout for quote provider requests"
    )
    quote_refresh_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Refresh period while a detail view is visible"
    )
    stock_exchange_suffix: str = Field(
        default=".NS",
        description="Yahoo Finance suffix for listed stock symbols"
    )
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL"
    )
    mfapi_base_url: str = Field(
        default="https://api.mfapi.in",
        description="mfapi.in base URL for mutual fund NAVs"
    )
    gold_rates_url: str = Field(
        default="https://www.goodreturns.in/gold-rates/varanasi.html",
        description="Page scraped for the 24K gold rate per 10 grams"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_database_config(self) -> "Settings":
        """
        Fill in the store location based on environment.

        Rules:
        - test: in-memory SQLite unless explicitly configured
        - otherwise: local SQLite file next to the project
        """
        if self.database_url is None:
            if self.environment == "test":
                object.__setattr__(self, "database_url", "sqlite:///:memory:")
            else:
                object.__setattr__(
                    self, "database_url", f"sqlite:///{_PROJECT_ROOT / 'portfolio.db'}"
                )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


settings = get_settings()
