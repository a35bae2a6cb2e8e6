# portfolio_tracker/services/valuation/service.py
"""
Valuation Service - values one asset class against live quotes.

Data Flow:
    Transactions → aggregate() → Positions
    Positions → concurrent quote fetches → Quotes (or None on failure)
    Positions + Quotes → ValuationCalculator → InstrumentValuations
    InstrumentValuations → summarize() → PortfolioSummary

Design Principles:
- Dependency Injection: quote fetchers injected via constructor
- Per-instrument isolation: a failed fetch degrades that instrument to
  "no quote"; it never aborts the class valuation
- No presentation knowledge: raw Decimals, no rounding

Usage:
    service = ValuationService(fetchers=default_quote_fetchers())
    result = await service.value_asset_class(AssetClass.STOCK, transactions)
    result.summary.total_current_value
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any, Awaitable, Callable, TYPE_CHECKING

from portfolio_tracker.config import settings
from portfolio_tracker.models import AssetClass
from portfolio_tracker.services.analytics.types import MonthArithmetic
from portfolio_tracker.services.protocols import QuoteFetchers
from portfolio_tracker.services.valuation.aggregation import (
    SortKey,
    aggregate,
    sort_valuations,
    summarize,
)
from portfolio_tracker.services.valuation.calculators import ValuationCalculator
from portfolio_tracker.services.valuation.types import (
    AssetClassValuation,
    InstrumentPosition,
)
from portfolio_tracker.utils.date_utils import utc_now

if TYPE_CHECKING:
    from portfolio_tracker.schemas.transactions import Transaction

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Main service for asset-class valuation.

    Attributes:
        _fetchers: Injected quote sources
        _calculator: Per-position calculator
    """

    def __init__(
            self,
            fetchers: QuoteFetchers | None = None,
            month_arithmetic: MonthArithmetic | None = None,
    ) -> None:
        """
        Initialize the valuation service.

        Args:
            fetchers: Quote sources. If None, every quoted instrument is
                      valued at its invested amount.
            month_arithmetic: Deposit month measure (default from settings)
        """
        self._fetchers = fetchers or QuoteFetchers()
        self._calculator = ValuationCalculator(month_arithmetic or settings.month_arithmetic)

    async def value_asset_class(
            self,
            asset_class: AssetClass,
            transactions: Sequence[Transaction],
            as_of: datetime | None = None,
            sort_by: SortKey | str | None = None,
    ) -> AssetClassValuation:
        """
        Value every position of one asset class.

        Args:
            asset_class: Class being valued
            transactions: Validated transactions of that class, storage order
            as_of: Valuation timestamp for deposit accrual (default: now)
            sort_by: Optional ordering of the resulting valuations

        Returns:
            AssetClassValuation with per-position valuations and totals
        """
        as_of = as_of or utc_now()
        positions = aggregate(transactions)

        quotes = await self._fetch_quotes(asset_class, positions)

        valuations = [
            self._calculator.value_instrument(position, quotes.get(position.instrument_id), as_of)
            for position in positions
        ]
        if sort_by is not None:
            valuations = sort_valuations(valuations, sort_by)

        warnings = [w for v in valuations for w in v.warnings]
        logger.debug(
            f"Valued {asset_class.value}: {len(positions)} positions, "
            f"{len(warnings)} warnings"
        )

        return AssetClassValuation(
            asset_class=asset_class,
            valuations=valuations,
            summary=summarize(valuations),
            transaction_count=len(transactions),
            warnings=warnings,
        )

    # =========================================================================
    # QUOTES
    # =========================================================================

    async def _fetch_quotes(
            self,
            asset_class: AssetClass,
            positions: list[InstrumentPosition],
    ) -> dict[str, Any]:
        """
        Fetch one quote per distinct instrument, concurrently.

        Returns:
            Dict mapping instrument_id to quote; failed fetches are absent
        """
        if not positions or not asset_class.requires_quote:
            return {}

        if asset_class == AssetClass.GOLD:
            # One shared rate for every gold item
            if self._fetchers.gold is None:
                return {}
            quote = await self._safe_fetch(asset_class, "gold", self._fetchers.gold)
            if quote is None:
                return {}
            return {position.instrument_id: quote for position in positions}

        fetcher = {
            AssetClass.STOCK: self._fetchers.stock,
            AssetClass.CRYPTO: self._fetchers.crypto,
            AssetClass.MUTUAL_FUND: self._fetchers.nav,
        }[asset_class]
        if fetcher is None:
            return {}

        instrument_ids = list(dict.fromkeys(p.instrument_id for p in positions))
        results = await asyncio.gather(*[
            self._safe_fetch(asset_class, instrument_id, fetcher, instrument_id)
            for instrument_id in instrument_ids
        ])
        return {
            instrument_id: quote
            for instrument_id, quote in zip(instrument_ids, results)
            if quote is not None
        }

    @staticmethod
    async def _safe_fetch(
            asset_class: AssetClass,
            instrument_id: str,
            fetch: Callable[..., Awaitable[Any]],
            *args: Any,
    ) -> Any | None:
        """Await a fetch; any failure is logged and becomes None."""
        try:
            return await fetch(*args)
        except Exception as e:
            logger.warning(
                f"Quote fetch failed for {asset_class.value} '{instrument_id}': "
                f"{type(e).__name__}: {e}"
            )
            return None
