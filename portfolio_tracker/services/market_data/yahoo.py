# portfolio_tracker/services/market_data/yahoo.py
"""
Yahoo Finance stock quote provider.

This module implements the stock quote fetcher using the yfinance library.
Symbols are stored without an exchange suffix; the configured suffix
(``.NS`` for NSE by default) is appended before the lookup.

Key features:
- Last price and previous close from ``Ticker.fast_info``
- yfinance is blocking, so each lookup runs in a worker thread
- Error translation to the MarketDataError hierarchy
- Retry mechanism inherited from base class

Limitations:
- Data may be delayed (15-20 minutes)
- Rate limits exist but are not documented
"""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

import yfinance as yf

from portfolio_tracker.config import settings
from portfolio_tracker.services.constants import HUNDRED, PERCENT_PRECISION, ZERO
from portfolio_tracker.services.exceptions import (
    InstrumentNotFoundError,
    ProviderUnavailableError,
    RateLimitError,
)
from portfolio_tracker.services.market_data.base import MarketQuote, QuoteProvider

logger = logging.getLogger(__name__)


class YahooStockQuoteProvider(QuoteProvider):
    """
    Yahoo Finance implementation of the stock quote fetcher.

    Retry Behavior (inherited from QuoteProvider):
        - Retries on ProviderUnavailableError and RateLimitError
        - Does NOT retry on InstrumentNotFoundError (permanent failure)

    Example:
        provider = YahooStockQuoteProvider()
        quote = await provider.get_quote("RELIANCE")
        quote.change_pct  # Decimal("1.25")
    """

    def __init__(self, exchange_suffix: str | None = None) -> None:
        """
        Initialize the Yahoo Finance provider.

        Args:
            exchange_suffix: Yahoo suffix for the exchange (default from settings)
        """
        self._suffix = exchange_suffix if exchange_suffix is not None else settings.stock_exchange_suffix
        logger.info(f"YahooStockQuoteProvider initialized (suffix={self._suffix!r})")

    @property
    def name(self) -> str:
        return "yahoo"

    async def __call__(self, symbol: str) -> MarketQuote:
        return await self.get_quote(symbol)

    async def get_quote(self, symbol: str) -> MarketQuote:
        """
        Fetch the live price of a listed stock.

        Args:
            symbol: Exchange symbol without suffix (e.g., "TCS")

        Returns:
            MarketQuote with change against the previous close

        Raises:
            InstrumentNotFoundError: If Yahoo has no price for the symbol
            ProviderUnavailableError: If Yahoo Finance is unavailable
        """
        return await self._execute_with_retry(self._fetch_quote, symbol.strip().upper())

    async def _fetch_quote(self, symbol: str) -> MarketQuote:
        """Internal method to fetch a quote (called by retry wrapper)."""
        return await asyncio.to_thread(self._fetch_quote_sync, symbol)

    def _fetch_quote_sync(self, symbol: str) -> MarketQuote:
        yahoo_symbol = self._build_yahoo_symbol(symbol)
        logger.debug(f"Fetching quote for {yahoo_symbol}")

        try:
            info = yf.Ticker(yahoo_symbol).fast_info
            price = self._to_decimal(info.last_price)
            previous_close = self._to_decimal(info.previous_close)
        except Exception as e:
            error_str = str(e).lower()
            if "not found" in error_str or "no data" in error_str or "delisted" in error_str:
                raise InstrumentNotFoundError(symbol, self.name)
            if "rate limit" in error_str or "too many requests" in error_str:
                raise RateLimitError(provider=self.name)

            logger.error(f"Yahoo Finance error for {yahoo_symbol}: {e}")
            raise ProviderUnavailableError(provider=self.name, reason=str(e))

        if price is None or price <= ZERO:
            raise InstrumentNotFoundError(symbol, self.name)
        if previous_close is None or previous_close <= ZERO:
            previous_close = price

        change = price - previous_close
        return MarketQuote(
            instrument_id=symbol,
            current_price=price,
            change_abs=change,
            change_pct=(change / previous_close * HUNDRED).quantize(
                PERCENT_PRECISION, rounding=ROUND_HALF_UP
            ),
            timestamp=datetime.now(timezone.utc),
        )

    def _build_yahoo_symbol(self, symbol: str) -> str:
        """Append the exchange suffix unless the symbol already carries one."""
        if "." in symbol or not self._suffix:
            return symbol
        return f"{symbol}{self._suffix}"
