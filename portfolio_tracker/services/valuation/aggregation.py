# portfolio_tracker/services/valuation/aggregation.py
"""
Aggregation engine: pooling, ordering and totals.

Pooling:
    Transactions of a poolable asset class (stocks by symbol, mutual funds
    by scheme code, crypto by coin id) merge into one position whose
    quantity and invested amount are the sums over its transactions.
    Deposits and gold are never pooled: one position per transaction.

    The first transaction seen for an instrument supplies the position's
    display metadata, and positions keep the order in which their
    instruments first appear.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from portfolio_tracker.models import AssetClass
from portfolio_tracker.services.analytics.returns import calculate_gain_percentage
from portfolio_tracker.services.constants import HUNDRED, ZERO
from portfolio_tracker.services.exceptions import ValidationError
from portfolio_tracker.services.valuation.types import (
    InstrumentPosition,
    InstrumentValuation,
    PortfolioSummary,
)

if TYPE_CHECKING:
    from portfolio_tracker.schemas.transactions import Transaction

logger = logging.getLogger(__name__)


class SortKey(str, enum.Enum):
    """Orderings offered by the asset-class detail views."""
    NAME = "name"
    PROFIT_LOSS = "profit_loss"
    CURRENT_VALUE = "current_value"


# =============================================================================
# POOLING
# =============================================================================

def _pool_key(transaction: Transaction) -> tuple[AssetClass, str]:
    asset_class = transaction.asset_class
    if asset_class.poolable:
        return asset_class, transaction.instrument_id
    return asset_class, transaction.id


def aggregate(transactions: Iterable[Transaction]) -> list[InstrumentPosition]:
    """
    Merge transactions into positions.

    Args:
        transactions: Validated transactions in storage order (any classes)

    Returns:
        One InstrumentPosition per instrument, in first-occurrence order

    Example:
        10 TCS @ 100 and 5 TCS @ 120 -> one position: quantity 15, invested 1600
    """
    groups: dict[tuple[AssetClass, str], list[Transaction]] = {}
    for transaction in transactions:
        groups.setdefault(_pool_key(transaction), []).append(transaction)

    positions: list[InstrumentPosition] = []
    for (asset_class, instrument_id), members in groups.items():
        representative = members[0]
        positions.append(InstrumentPosition(
            asset_class=asset_class,
            instrument_id=instrument_id,
            name=representative.label,
            quantity=sum((t.quantity for t in members), ZERO),
            invested_amount=sum((t.invested_amount for t in members), ZERO),
            representative=representative,
            transactions=tuple(members),
        ))

    return positions


# =============================================================================
# ORDERING
# =============================================================================

def sort_valuations(
        valuations: list[InstrumentValuation],
        sort_by: SortKey | str,
) -> list[InstrumentValuation]:
    """
    Return valuations in the requested order.

    - NAME: ascending, case-insensitive, stable for equal names
    - PROFIT_LOSS: descending absolute gain
    - CURRENT_VALUE: descending current value

    Raises:
        ValidationError: Unknown sort key
    """
    try:
        key = SortKey(sort_by)
    except ValueError:
        raise ValidationError(f"Unknown sort key: {sort_by!r}", field="sort_by")

    if key == SortKey.NAME:
        return sorted(valuations, key=lambda v: v.name.casefold())
    if key == SortKey.PROFIT_LOSS:
        return sorted(valuations, key=lambda v: v.gain_amount, reverse=True)
    return sorted(valuations, key=lambda v: v.current_value, reverse=True)


# =============================================================================
# TOTALS
# =============================================================================

def summarize(valuations: Iterable[InstrumentValuation]) -> PortfolioSummary:
    """
    Sum invested, current value and day change over valuations.

    The day change percentage is measured against the previous value
    (current - day change); it is 0 when that value is 0.
    """
    total_invested = ZERO
    total_current = ZERO
    total_day_change = ZERO
    count = 0

    for valuation in valuations:
        total_invested += valuation.invested_amount
        total_current += valuation.current_value
        total_day_change += valuation.day_change_amount
        count += 1

    total_gain = total_current - total_invested
    previous_value = total_current - total_day_change
    day_change_percentage = (
        total_day_change / previous_value * HUNDRED if previous_value != ZERO else ZERO
    )

    return PortfolioSummary(
        total_invested=total_invested,
        total_current_value=total_current,
        total_gain=total_gain,
        total_gain_percentage=calculate_gain_percentage(total_gain, total_invested),
        total_day_change=total_day_change,
        total_day_change_percentage=day_change_percentage,
        position_count=count,
    )


def empty_summary() -> PortfolioSummary:
    return summarize([])
