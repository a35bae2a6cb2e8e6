# tests/services/market_data/test_yahoo_provider.py
"""
Tests for YahooStockQuoteProvider.

These tests use mocking to avoid actual API calls to Yahoo Finance.
"""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from portfolio_tracker.services.exceptions import (
    InstrumentNotFoundError,
    ProviderUnavailableError,
    RateLimitError,
)
from portfolio_tracker.services.market_data.yahoo import YahooStockQuoteProvider


class FastYahoo(YahooStockQuoteProvider):
    RETRY_MIN_WAIT = 0
    RETRY_MAX_WAIT = 0


def _ticker(last_price, previous_close) -> MagicMock:
    ticker = MagicMock()
    ticker.fast_info.last_price = last_price
    ticker.fast_info.previous_close = previous_close
    return ticker


# =============================================================================
# SYMBOL MAPPING
# =============================================================================

class TestSymbolMapping:

    def test_default_suffix(self):
        assert YahooStockQuoteProvider()._build_yahoo_symbol("TCS") == "TCS.NS"

    def test_custom_suffix(self):
        assert YahooStockQuoteProvider(".BO")._build_yahoo_symbol("TCS") == "TCS.BO"

    def test_symbol_with_suffix_unchanged(self):
        assert YahooStockQuoteProvider()._build_yahoo_symbol("TCS.BO") == "TCS.BO"

    def test_empty_suffix(self):
        assert YahooStockQuoteProvider("")._build_yahoo_symbol("AAPL") == "AAPL"


# =============================================================================
# QUOTES
# =============================================================================

class TestGetQuote:

    @patch("portfolio_tracker.services.market_data.yahoo.yf.Ticker")
    async def test_quote(self, mock_ticker):
        mock_ticker.return_value = _ticker(3500.0, 3450.0)

        quote = await FastYahoo()("tcs")

        mock_ticker.assert_called_once_with("TCS.NS")
        assert quote.instrument_id == "TCS"
        assert quote.current_price == Decimal("3500.0")
        assert quote.change_abs == Decimal("50.0")
        assert quote.change_pct == Decimal("1.45")

    @patch("portfolio_tracker.services.market_data.yahoo.yf.Ticker")
    async def test_missing_previous_close(self, mock_ticker):
        mock_ticker.return_value = _ticker(3500.0, None)

        quote = await FastYahoo().get_quote("TCS")

        assert quote.change_abs == Decimal("0")
        assert quote.change_pct == Decimal("0")

    @patch("portfolio_tracker.services.market_data.yahoo.yf.Ticker")
    async def test_no_price(self, mock_ticker):
        mock_ticker.return_value = _ticker(None, None)

        with pytest.raises(InstrumentNotFoundError):
            await FastYahoo().get_quote("NOSUCH")

        assert mock_ticker.call_count == 1

    @patch("portfolio_tracker.services.market_data.yahoo.yf.Ticker")
    async def test_nan_price(self, mock_ticker):
        mock_ticker.return_value = _ticker(float("nan"), 100.0)

        with pytest.raises(InstrumentNotFoundError):
            await FastYahoo().get_quote("TCS")

    @patch("portfolio_tracker.services.market_data.yahoo.yf.Ticker")
    async def test_delisted(self, mock_ticker):
        mock_ticker.side_effect = Exception("TCSX.NS: possibly delisted; no price data found")

        with pytest.raises(InstrumentNotFoundError):
            await FastYahoo().get_quote("TCSX")

    @patch("portfolio_tracker.services.market_data.yahoo.yf.Ticker")
    async def test_rate_limit_retried(self, mock_ticker):
        mock_ticker.side_effect = Exception("Too Many Requests. Rate limited.")

        with pytest.raises(RateLimitError):
            await FastYahoo().get_quote("TCS")

        assert mock_ticker.call_count == FastYahoo.MAX_RETRY_ATTEMPTS

    @patch("portfolio_tracker.services.market_data.yahoo.yf.Ticker")
    async def test_transient_error_then_success(self, mock_ticker):
        mock_ticker.side_effect = [
            Exception("Connection reset by peer"),
            _ticker(3500.0, 3500.0),
        ]

        quote = await FastYahoo().get_quote("TCS")

        assert quote.current_price == Decimal("3500.0")
        assert mock_ticker.call_count == 2

    @patch("portfolio_tracker.services.market_data.yahoo.yf.Ticker")
    async def test_persistent_error(self, mock_ticker):
        mock_ticker.side_effect = Exception("Connection reset by peer")

        with pytest.raises(ProviderUnavailableError):
            await FastYahoo().get_quote("TCS")
