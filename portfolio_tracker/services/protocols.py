# portfolio_tracker/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- Concrete stores and providers satisfy protocols without inheritance
- Test fakes (plain async functions, dict-backed stores) work as-is
- Clear documentation of the narrow interfaces the valuation core consumes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_tracker.services.market_data.base import (
        GoldQuote,
        MarketQuote,
        NAVQuote,
    )


# =============================================================================
# STORAGE
# =============================================================================

class KeyValueStoreProtocol(Protocol):
    """Interface required by the transaction repository and snapshot builder."""

    async def get(self, key: str) -> Any | None:
        ...

    async def set(self, key: str, value: Any) -> None:
        ...

    async def remove(self, keys: list[str]) -> None:
        ...


# =============================================================================
# QUOTE FETCHERS
# =============================================================================

class StockQuoteFetcher(Protocol):
    async def __call__(self, symbol: str) -> MarketQuote:
        ...


class CryptoQuoteFetcher(Protocol):
    async def __call__(self, coin_id: str) -> MarketQuote:
        ...


class NavFetcher(Protocol):
    async def __call__(self, scheme_code: str) -> NAVQuote:
        ...


class GoldPriceFetcher(Protocol):
    async def __call__(self) -> GoldQuote:
        ...


@dataclass(frozen=True)
class QuoteFetchers:
    """
    The quote sources consumed by the valuation service.

    Any fetcher may be None; instruments of that class are then valued
    without a live quote. Every fetcher signals failure by raising.
    """

    stock: StockQuoteFetcher | None = None
    crypto: CryptoQuoteFetcher | None = None
    nav: NavFetcher | None = None
    gold: GoldPriceFetcher | None = None
