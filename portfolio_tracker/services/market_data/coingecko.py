# portfolio_tracker/services/market_data/coingecko.py
"""
CoinGecko quote provider for cryptocurrencies.

Uses the public ``/simple/price`` endpoint with INR as the quote currency
and the 24h percentage change. One request can price many coins, so the
batch method is the primary path; the single lookup is a one-id batch.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

import httpx

from portfolio_tracker.config import settings
from portfolio_tracker.services.constants import HUNDRED
from portfolio_tracker.services.exceptions import (
    InstrumentNotFoundError,
    QuoteParseError,
)
from portfolio_tracker.services.market_data.base import MarketQuote
from portfolio_tracker.services.market_data.http import HttpQuoteProvider

logger = logging.getLogger(__name__)

VS_CURRENCY = "inr"


class CoinGeckoQuoteProvider(HttpQuoteProvider):
    """
    CoinGecko implementation of the crypto quote fetcher.

    Example:
        provider = CoinGeckoQuoteProvider()
        quote = await provider.get_quote("bitcoin")
        quote.current_price  # Decimal("5432100")
    """

    def __init__(
            self,
            base_url: str | None = None,
            timeout: float | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url or settings.coingecko_base_url, timeout, transport)

    @property
    def name(self) -> str:
        return "coingecko"

    async def __call__(self, coin_id: str) -> MarketQuote:
        return await self.get_quote(coin_id)

    async def get_quote(self, coin_id: str) -> MarketQuote:
        """
        Fetch the INR price of one coin.

        Raises:
            InstrumentNotFoundError: CoinGecko does not list the coin
            ProviderUnavailableError: Network or API error (retryable)
        """
        quotes = await self.get_quotes([coin_id])
        if coin_id not in quotes:
            raise InstrumentNotFoundError(coin_id, self.name)
        return quotes[coin_id]

    async def get_quotes(self, coin_ids: list[str]) -> dict[str, MarketQuote]:
        """
        Fetch INR prices for several coins in one request.

        Coins CoinGecko does not know are absent from the result.
        """
        if not coin_ids:
            return {}
        return await self._execute_with_retry(self._fetch_quotes, coin_ids)

    async def _fetch_quotes(self, coin_ids: list[str]) -> dict[str, MarketQuote]:
        """Internal method to fetch prices (called by retry wrapper)."""
        logger.debug(f"Fetching CoinGecko prices for {len(coin_ids)} coins")
        response = await self._get(
            "/simple/price",
            params={
                "ids": ",".join(coin_ids),
                "vs_currencies": VS_CURRENCY,
                "include_24hr_change": "true",
            },
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise QuoteParseError(self.name, f"invalid JSON: {e}")
        if not isinstance(payload, dict):
            raise QuoteParseError(self.name, "expected a JSON object")

        now = datetime.now(timezone.utc)
        quotes: dict[str, MarketQuote] = {}
        for coin_id in coin_ids:
            entry = payload.get(coin_id)
            if not entry:
                logger.warning(f"CoinGecko returned no price for '{coin_id}'")
                continue

            price = self._to_decimal(entry.get(VS_CURRENCY))
            if price is None or price <= 0:
                raise QuoteParseError(self.name, f"missing {VS_CURRENCY} price for '{coin_id}'")
            change_pct = self._to_decimal(entry.get(f"{VS_CURRENCY}_24h_change")) or Decimal("0")

            # Price 24h ago is price / (1 + pct/100)
            change_abs = price * change_pct / (HUNDRED + change_pct) if change_pct > -HUNDRED else Decimal("0")

            quotes[coin_id] = MarketQuote(
                instrument_id=coin_id,
                current_price=price,
                change_abs=change_abs,
                change_pct=change_pct,
                timestamp=now,
            )
        return quotes
