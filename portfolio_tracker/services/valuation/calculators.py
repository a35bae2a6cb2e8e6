# portfolio_tracker/services/valuation/calculators.py
"""
Point-in-time valuation of a single position.

Valuation rules by asset class:

    Stocks        value = quantity × price        day change = quantity × change_abs
    Crypto        value = quantity × price        day change = change_pct/100 × value
    Mutual funds  value = units × NAV             day change = units × change_abs
    Gold          value = pure_g × rate_10g / 10  day change = pure_g × change_abs / 10
                  (pure_g = weight × purity / 100)
    FD / RD       accrued deposit value at as_of; no day change

Missing quotes:
    A quoted class valued without a quote is held at its invested amount
    with zero gain and zero day change, and carries a warning. The
    MissingQuoteError raised by the quote lookup never leaves this module.

Design Principles:
- Stateless apart from configuration
- Uses Decimal for ALL financial calculations
- No display rounding; presentation formats later
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Union

from portfolio_tracker.models import AssetClass
from portfolio_tracker.services.analytics.interest import (
    calculate_fd_current_value,
    calculate_rd_current_value,
)
from portfolio_tracker.services.analytics.returns import calculate_gain_percentage
from portfolio_tracker.services.analytics.types import MonthArithmetic
from portfolio_tracker.services.constants import GOLD_QUOTE_GRAMS, HUNDRED, ZERO
from portfolio_tracker.services.exceptions import MissingQuoteError
from portfolio_tracker.services.valuation.types import (
    InstrumentPosition,
    InstrumentValuation,
)
from portfolio_tracker.utils.date_utils import utc_now

if TYPE_CHECKING:
    from portfolio_tracker.services.market_data.base import GoldQuote, MarketQuote, NAVQuote

    Quote = Union[MarketQuote, NAVQuote, GoldQuote]

logger = logging.getLogger(__name__)


class ValuationCalculator:
    """
    Values one InstrumentPosition against an optional quote.

    Configuration:
        month_arithmetic: How elapsed months are measured for deposits

    Example:
        calc = ValuationCalculator()
        valuation = calc.value_instrument(position, quote)
        valuation.gain_percentage  # Decimal("40.625")
    """

    def __init__(self, month_arithmetic: MonthArithmetic = "average") -> None:
        self._month_arithmetic = month_arithmetic

    def value_instrument(
            self,
            position: InstrumentPosition,
            quote: Quote | None,
            as_of: datetime | None = None,
    ) -> InstrumentValuation:
        """
        Value a position.

        Args:
            position: Pooled position to value
            quote: Quote for the position's instrument (ignored for FD/RD)
            as_of: Valuation timestamp for deposit accrual (default: now)

        Returns:
            InstrumentValuation; never raises for a missing quote
        """
        asset_class = position.asset_class

        if not asset_class.requires_quote:
            return self._value_deposit(position, as_of or utc_now())

        try:
            live_quote = self._require_quote(position, quote)
        except MissingQuoteError as e:
            logger.warning(f"{e}; holding at invested amount")
            return self._value_at_cost(position, str(e))

        if asset_class == AssetClass.STOCK:
            return self._value_stock(position, live_quote)
        if asset_class == AssetClass.CRYPTO:
            return self._value_crypto(position, live_quote)
        if asset_class == AssetClass.MUTUAL_FUND:
            return self._value_mutual_fund(position, live_quote)
        return self._value_gold(position, live_quote)

    # =========================================================================
    # QUOTED CLASSES
    # =========================================================================

    @staticmethod
    def _require_quote(position: InstrumentPosition, quote: Quote | None) -> Quote:
        if quote is None:
            raise MissingQuoteError(position.asset_class.value, position.instrument_id)
        return quote

    def _value_stock(self, position: InstrumentPosition, quote: MarketQuote) -> InstrumentValuation:
        current_value = position.quantity * quote.current_price
        return self._build(
            position,
            current_value=current_value,
            day_change_amount=position.quantity * quote.change_abs,
            day_change_percentage=quote.change_pct,
            unit_price=quote.current_price,
        )

    def _value_crypto(self, position: InstrumentPosition, quote: MarketQuote) -> InstrumentValuation:
        current_value = position.quantity * quote.current_price
        return self._build(
            position,
            current_value=current_value,
            day_change_amount=quote.change_pct / HUNDRED * current_value,
            day_change_percentage=quote.change_pct,
            unit_price=quote.current_price,
        )

    def _value_mutual_fund(self, position: InstrumentPosition, quote: NAVQuote) -> InstrumentValuation:
        current_value = position.quantity * quote.current_nav
        return self._build(
            position,
            current_value=current_value,
            day_change_amount=position.quantity * quote.change_abs,
            day_change_percentage=quote.change_pct,
            unit_price=quote.current_nav,
        )

    def _value_gold(self, position: InstrumentPosition, quote: GoldQuote) -> InstrumentValuation:
        pure_weight = position.representative.pure_weight
        current_value = pure_weight * quote.price_per_10g / GOLD_QUOTE_GRAMS

        day_change_percentage = ZERO
        if quote.previous_price_per_10g != ZERO:
            day_change_percentage = quote.change_abs / quote.previous_price_per_10g * HUNDRED

        return self._build(
            position,
            current_value=current_value,
            day_change_amount=pure_weight * quote.change_abs / GOLD_QUOTE_GRAMS,
            day_change_percentage=day_change_percentage,
            unit_price=quote.price_per_10g,
        )

    def _value_at_cost(self, position: InstrumentPosition, warning: str) -> InstrumentValuation:
        return InstrumentValuation(
            position=position,
            current_value=position.invested_amount,
            gain_amount=ZERO,
            gain_percentage=ZERO,
            day_change_amount=ZERO,
            day_change_percentage=ZERO,
            unit_price=None,
            has_live_quote=False,
            warnings=[warning],
        )

    # =========================================================================
    # DEPOSITS
    # =========================================================================

    def _value_deposit(self, position: InstrumentPosition, as_of: datetime) -> InstrumentValuation:
        """Accrued value of an FD or RD at as_of."""
        deposit = position.representative
        accrue = (
            calculate_rd_current_value
            if position.asset_class == AssetClass.RECURRING_DEPOSIT
            else calculate_fd_current_value
        )
        current_value = accrue(
            deposit.amount,
            deposit.roi,
            deposit.duration,
            deposit.invested_on,
            as_of,
            self._month_arithmetic,
            deposit.maturity_amount,
        )
        return self._build(
            position,
            current_value=current_value,
            day_change_amount=ZERO,
            day_change_percentage=ZERO,
            unit_price=None,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _build(
            position: InstrumentPosition,
            current_value: Decimal,
            day_change_amount: Decimal,
            day_change_percentage: Decimal,
            unit_price: Decimal | None,
    ) -> InstrumentValuation:
        gain = current_value - position.invested_amount
        return InstrumentValuation(
            position=position,
            current_value=current_value,
            gain_amount=gain,
            gain_percentage=calculate_gain_percentage(gain, position.invested_amount),
            day_change_amount=day_change_amount,
            day_change_percentage=day_change_percentage,
            unit_price=unit_price,
        )
