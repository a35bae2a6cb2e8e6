# portfolio_tracker/schemas/__init__.py
"""Pydantic schemas for persisted records: transactions and the snapshot cache."""

from portfolio_tracker.schemas.snapshot import AssetClassTotals, PortfolioSnapshot
from portfolio_tracker.schemas.transactions import (
    TRANSACTION_MODELS,
    CryptoTransaction,
    FixedDepositTransaction,
    GoldTransaction,
    Money,
    MutualFundTransaction,
    RecurringDepositTransaction,
    SipDetails,
    StockTransaction,
    Transaction,
    TransactionAdapter,
    TransactionBase,
    parse_transaction,
)

__all__ = [
    "TRANSACTION_MODELS",
    "AssetClassTotals",
    "CryptoTransaction",
    "FixedDepositTransaction",
    "GoldTransaction",
    "Money",
    "MutualFundTransaction",
    "PortfolioSnapshot",
    "RecurringDepositTransaction",
    "SipDetails",
    "StockTransaction",
    "Transaction",
    "TransactionAdapter",
    "TransactionBase",
    "parse_transaction",
]
