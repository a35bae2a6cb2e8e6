# portfolio_tracker/services/market_data/base.py
"""
Abstract interface for quote providers.

This module defines the quote snapshots the valuation core consumes and the
contract all providers follow. Using an abstract base class allows for:
- Easy addition of new sources
- Mock implementations for testing
- Consistent retry behavior across all providers

Design Principles:
- Providers translate their transport errors into MarketDataError subclasses
- Common retry logic implemented once in the base class
- Quotes are immutable value objects with Decimal prices
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from portfolio_tracker.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


# =============================================================================
# DATA CLASSES - QUOTES
# =============================================================================

@dataclass(frozen=True)
class MarketQuote:
    """
    Live price of a stock or cryptocurrency.

    Attributes:
        instrument_id: Symbol or coin id the quote was requested for
        current_price: Last traded price in INR
        change_abs: Absolute price change over the trading day / 24h
        change_pct: Percentage price change over the same window
        timestamp: When the provider produced the quote
    """

    instrument_id: str
    current_price: Decimal
    change_abs: Decimal
    change_pct: Decimal
    timestamp: datetime

    def __post_init__(self) -> None:
        if self.current_price <= 0:
            raise ValueError(f"current_price must be positive, got {self.current_price}")


@dataclass(frozen=True)
class NAVQuote:
    """
    Latest published NAV of a mutual fund scheme.

    Attributes:
        scheme_code: AMFI scheme code
        current_nav: Latest NAV per unit
        nav_date: Date the NAV was published for
        change_abs: Change against the previous published NAV
        change_pct: Percentage change against the previous NAV
    """

    scheme_code: str
    current_nav: Decimal
    nav_date: date
    change_abs: Decimal
    change_pct: Decimal

    def __post_init__(self) -> None:
        if self.current_nav <= 0:
            raise ValueError(f"current_nav must be positive, got {self.current_nav}")


@dataclass(frozen=True)
class GoldQuote:
    """
    24K gold rate per 10 grams.

    Attributes:
        price_per_10g: Today's rate
        previous_price_per_10g: Yesterday's rate
        change_abs: today - yesterday
        as_of: When the rate was read
    """

    price_per_10g: Decimal
    previous_price_per_10g: Decimal
    change_abs: Decimal
    as_of: datetime


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class QuoteProvider(ABC):
    """
    Abstract base class for quote providers.

    Retry Behavior:
        The base class provides an `_execute_with_retry` coroutine that
        implements exponential backoff. Subclasses can override the retry
        configuration by setting class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
        - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
        - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

    Retryable Exceptions:
        - ProviderUnavailableError: Network issues, timeouts, server errors
        - RateLimitError: API rate limit exceeded

    Non-Retryable Exceptions:
        - InstrumentNotFoundError: Permanent failure
        - QuoteParseError: The response will not get better on retry
    """

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: float = 1
    RETRY_MAX_WAIT: float = 10
    RETRY_MULTIPLIER: float = 1

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this provider.

        Used for logging and error messages.
        """
        pass

    async def _execute_with_retry(
            self,
            func: Callable[..., Awaitable[T]],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Await a coroutine function with retry logic for transient failures.

        Raises:
            The last exception if all retries fail
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await func(*args, **kwargs)
        raise AssertionError("unreachable")  # pragma: no cover

    @staticmethod
    def _to_decimal(value: Any) -> Decimal | None:
        """Convert a value to Decimal, returning None for NaN/None."""
        if value is None:
            return None
        try:
            if math.isnan(float(value)):
                return None
            return Decimal(str(value))
        except (TypeError, ValueError):
            return None
