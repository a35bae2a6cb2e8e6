# portfolio_tracker/services/__init__.py
"""
Service layer for the portfolio tracker.

This package contains the valuation core and the services around it.
Services:
- Have NO knowledge of presentation (no formatting, no UI alerts)
- Raise domain-specific exceptions
- Receive storage and quote sources via their constructors
- Are easily testable via dependency injection

Usage:
    from portfolio_tracker.services.snapshot_service import SnapshotBuilder
    from portfolio_tracker.services.transaction_service import TransactionService
    from portfolio_tracker.services import ServiceError, MissingQuoteError

Architecture:
    services/
    ├── __init__.py                  # This file - exception exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Business constants
    ├── protocols.py                 # Storage and quote-fetcher interfaces
    ├── transaction_service.py       # Transaction repository
    ├── snapshot_service.py          # Portfolio snapshot builder
    ├── refresh.py                   # Scope-bound periodic refresh
    ├── analytics/                   # Returns, XIRR, deposit interest
    ├── valuation/                   # Pooling, per-position valuation, totals
    └── market_data/                 # Quote providers

Services are imported from their modules rather than re-exported here;
the schemas depend on analytics, and the services depend on the schemas.
"""

from portfolio_tracker.services.exceptions import (
    InstrumentNotFoundError,
    InvalidTransactionError,
    MarketDataError,
    MissingQuoteError,
    NotFoundError,
    ProviderUnavailableError,
    QuoteParseError,
    RateLimitError,
    ServiceError,
    StorageError,
    TransactionNotFoundError,
    ValidationError,
)

__all__ = [
    "InstrumentNotFoundError",
    "InvalidTransactionError",
    "MarketDataError",
    "MissingQuoteError",
    "NotFoundError",
    "ProviderUnavailableError",
    "QuoteParseError",
    "RateLimitError",
    "ServiceError",
    "StorageError",
    "TransactionNotFoundError",
    "ValidationError",
]
