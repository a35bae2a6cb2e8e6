# portfolio_tracker/models.py
import enum
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, DateTime, JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class AssetClass(str, enum.Enum):
    """
    Canonical asset-class enumeration.

    The value is the storage id used in transaction list keys and in the
    snapshot cache. Every other piece of per-class metadata hangs off the
    member so it is declared exactly once.
    """
    RECURRING_DEPOSIT = "rd"
    FIXED_DEPOSIT = "fd"
    STOCK = "stocks"
    MUTUAL_FUND = "mf"
    CRYPTO = "crypto"
    GOLD = "gold"

    @property
    def display_name(self) -> str:
        return _ASSET_CLASS_META[self]["display_name"]

    @property
    def poolable(self) -> bool:
        """True if transactions of the same instrument merge into one position."""
        return _ASSET_CLASS_META[self]["poolable"]

    @property
    def requires_quote(self) -> bool:
        """True if valuation needs a live market quote (FD/RD use formulas)."""
        return self not in (AssetClass.RECURRING_DEPOSIT, AssetClass.FIXED_DEPOSIT)

    @property
    def storage_key(self) -> str:
        return f"transactions_{self.value}"


_ASSET_CLASS_META: dict[AssetClass, dict[str, Any]] = {
    AssetClass.RECURRING_DEPOSIT: {"display_name": "Recurring Deposits", "poolable": False},
    AssetClass.FIXED_DEPOSIT: {"display_name": "Fixed Deposits", "poolable": False},
    AssetClass.STOCK: {"display_name": "Stocks", "poolable": True},
    AssetClass.MUTUAL_FUND: {"display_name": "Mutual Funds", "poolable": True},
    AssetClass.CRYPTO: {"display_name": "Cryptocurrency", "poolable": True},
    AssetClass.GOLD: {"display_name": "Gold Deposits", "poolable": False},
}


class KeyValueEntry(Base):
    """
    One record of the local key-value store.

    Values are JSON documents: transaction lists per asset class and the
    portfolio snapshot cache.
    """
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(key='{self.key}')>"
