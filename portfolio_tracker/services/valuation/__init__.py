# portfolio_tracker/services/valuation/__init__.py
"""
Valuation Service Package.

This package turns stored transactions plus live quotes into
per-instrument and per-class metrics.

Usage:
    from portfolio_tracker.services.valuation import ValuationService

    service = ValuationService(fetchers)
    result = await service.value_asset_class(AssetClass.MUTUAL_FUND, transactions)

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Internal data classes
    ├── calculators.py           # Per-position valuation rules
    ├── aggregation.py           # Pooling, ordering, totals
    └── service.py               # ValuationService (orchestrator)

Data Flow:
    Transactions → aggregate() → InstrumentPositions
    Positions + Quotes → ValuationCalculator → InstrumentValuations
    InstrumentValuations → summarize() → PortfolioSummary
"""

from portfolio_tracker.services.valuation.aggregation import (
    SortKey,
    aggregate,
    empty_summary,
    sort_valuations,
    summarize,
)
from portfolio_tracker.services.valuation.calculators import ValuationCalculator
from portfolio_tracker.services.valuation.service import ValuationService
from portfolio_tracker.services.valuation.types import (
    AssetClassValuation,
    InstrumentPosition,
    InstrumentValuation,
    PortfolioSummary,
)

__all__ = [
    "AssetClassValuation",
    "InstrumentPosition",
    "InstrumentValuation",
    "PortfolioSummary",
    "SortKey",
    "ValuationCalculator",
    "ValuationService",
    "aggregate",
    "empty_summary",
    "sort_valuations",
    "summarize",
]
