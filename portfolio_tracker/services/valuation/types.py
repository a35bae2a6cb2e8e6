# portfolio_tracker/services/valuation/types.py
"""
Internal data types for the valuation core.

These dataclasses are used by the calculators and aggregation engine.
They are NOT Pydantic schemas - the persisted snapshot lives in
portfolio_tracker/schemas/snapshot.py.

Design Principles:
- Use Decimal for ALL financial values (never float)
- Positions are immutable value objects (frozen=True)
- Optional fields use None, not sentinel values
- Warnings accumulate for data quality tracking

Type Hierarchy:
    InstrumentPosition     - Pooled transactions of one instrument
    InstrumentValuation    - Current value and gain of one position
    PortfolioSummary       - Totals over a list of valuations
    AssetClassValuation    - Everything derived for one asset class
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from portfolio_tracker.models import AssetClass

if TYPE_CHECKING:
    from portfolio_tracker.schemas.transactions import Transaction


# =============================================================================
# POSITIONS
# =============================================================================

@dataclass(frozen=True)
class InstrumentPosition:
    """
    All transactions of one instrument merged into a single position.

    For non-poolable classes (FD, RD, gold) a position wraps exactly one
    transaction.

    Attributes:
        asset_class: Asset class of every constituent transaction
        instrument_id: Symbol, scheme code, coin id or transaction id
        name: Display name taken from the representative transaction
        quantity: Pooled shares / units / coins / grams / principal
        invested_amount: Pooled cost basis
        representative: First transaction in storage order (metadata source)
        transactions: All constituent transactions, storage order
    """

    asset_class: AssetClass
    instrument_id: str
    name: str
    quantity: Decimal
    invested_amount: Decimal
    representative: Transaction
    transactions: tuple[Transaction, ...]

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)


# =============================================================================
# VALUATIONS
# =============================================================================

@dataclass
class InstrumentValuation:
    """
    Complete valuation for one position.

    Attributes:
        position: The valued position
        current_value: Market value, accrued deposit value, or the invested
                       amount when no quote was available
        gain_amount: current_value - invested
        gain_percentage: gain / invested × 100 (0 when invested is 0)
        day_change_amount: Value change over the quote's trading day
        day_change_percentage: Percentage change over the same window
        unit_price: Price / NAV / rate used (None for deposits or no quote)
        has_live_quote: False when valued without a market quote
        warnings: Data quality notes (e.g., missing quote)
    """

    position: InstrumentPosition
    current_value: Decimal
    gain_amount: Decimal
    gain_percentage: Decimal
    day_change_amount: Decimal
    day_change_percentage: Decimal
    unit_price: Decimal | None = None
    has_live_quote: bool = True
    warnings: list[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.position.name

    @property
    def invested_amount(self) -> Decimal:
        return self.position.invested_amount

    @property
    def is_profitable(self) -> bool:
        return self.gain_amount > 0


@dataclass(frozen=True)
class PortfolioSummary:
    """
    Totals over a set of valuations.

    Attributes:
        total_invested: Σ invested
        total_current_value: Σ current value
        total_gain: current - invested
        total_gain_percentage: gain / invested × 100 (0 when invested is 0)
        total_day_change: Σ day change
        total_day_change_percentage: day change relative to the previous
                                     value (current - day change)
        position_count: Number of valuations summed
    """

    total_invested: Decimal
    total_current_value: Decimal
    total_gain: Decimal
    total_gain_percentage: Decimal
    total_day_change: Decimal
    total_day_change_percentage: Decimal
    position_count: int


@dataclass
class AssetClassValuation:
    """
    Result of valuing one asset class.

    Attributes:
        asset_class: The valued class
        valuations: One valuation per position, aggregation order
        summary: Totals over the valuations
        transaction_count: Number of stored transactions (not positions)
        warnings: Class-level and per-instrument warnings
    """

    asset_class: AssetClass
    valuations: list[InstrumentValuation]
    summary: PortfolioSummary
    transaction_count: int
    warnings: list[str] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0
