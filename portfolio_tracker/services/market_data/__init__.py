# portfolio_tracker/services/market_data/__init__.py
"""
Quote providers for the valuation core.

Usage:
    from portfolio_tracker.services.market_data import default_quote_fetchers

    fetchers = default_quote_fetchers()
    quote = await fetchers.stock("TCS")

Architecture:
    market_data/
    ├── base.py        # Quote dataclasses + QuoteProvider ABC (tenacity retry)
    ├── http.py        # httpx plumbing and error translation
    ├── yahoo.py       # Stocks (yfinance)
    ├── coingecko.py   # Crypto (CoinGecko simple price)
    ├── mfapi.py       # Mutual fund NAVs (mfapi.in)
    └── gold.py        # 24K gold per 10 g (goodreturns.in scrape)
"""

from portfolio_tracker.services.market_data.base import (
    GoldQuote,
    MarketQuote,
    NAVQuote,
    QuoteProvider,
)
from portfolio_tracker.services.market_data.coingecko import CoinGeckoQuoteProvider
from portfolio_tracker.services.market_data.gold import GoodReturnsGoldProvider
from portfolio_tracker.services.market_data.mfapi import MfApiNavProvider
from portfolio_tracker.services.market_data.yahoo import YahooStockQuoteProvider
from portfolio_tracker.services.protocols import QuoteFetchers


def default_quote_fetchers() -> QuoteFetchers:
    """Bundle the live providers configured from settings."""
    return QuoteFetchers(
        stock=YahooStockQuoteProvider(),
        crypto=CoinGeckoQuoteProvider(),
        nav=MfApiNavProvider(),
        gold=GoodReturnsGoldProvider(),
    )


__all__ = [
    "CoinGeckoQuoteProvider",
    "GoldQuote",
    "GoodReturnsGoldProvider",
    "MarketQuote",
    "MfApiNavProvider",
    "NAVQuote",
    "QuoteProvider",
    "YahooStockQuoteProvider",
    "default_quote_fetchers",
]
