# portfolio_tracker/schemas/snapshot.py
"""
Pydantic schema for the cached portfolio snapshot.

Stored under the ``portfolioData`` key as:

    {
        "totalInvestment": 150000.0,
        "currentValue": 162000.0,
        "totalGain": 12000.0,
        "gainPercentage": 8.0,
        "investments": {
            "rd": {"total": ..., "count": ..., "currentValue": ..., "allocationPercentage": ...},
            "fd": {...}, "stocks": {...}, "mf": {...}, "crypto": {...}, "gold": {...}
        }
    }

The snapshot is derived data: it is rebuilt in full from the transaction
lists and overwritten, never patched in place.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from portfolio_tracker.models import AssetClass
from portfolio_tracker.schemas.transactions import Money
from portfolio_tracker.services.constants import ZERO


class AssetClassTotals(BaseModel):
    """Per-asset-class entry of the snapshot."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total: Money = Field(default=ZERO, description="Total invested in the class")
    count: int = Field(default=0, ge=0, description="Number of stored transactions")
    current_value: Money = Field(default=ZERO, alias="currentValue")
    allocation_percentage: Money = Field(
        default=ZERO,
        alias="allocationPercentage",
        description="Share of the portfolio's current value, in percent"
    )


def _empty_investments() -> dict[AssetClass, AssetClassTotals]:
    return {asset_class: AssetClassTotals() for asset_class in AssetClass}


class PortfolioSnapshot(BaseModel):
    """Portfolio totals plus one entry per asset class."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total_investment: Money = Field(default=ZERO, alias="totalInvestment")
    current_value: Money = Field(default=ZERO, alias="currentValue")
    total_gain: Money = Field(default=ZERO, alias="totalGain")
    gain_percentage: Money = Field(default=ZERO, alias="gainPercentage")
    investments: dict[AssetClass, AssetClassTotals] = Field(default_factory=_empty_investments)

    @classmethod
    def empty(cls) -> PortfolioSnapshot:
        """Zeroed snapshot with all six classes present."""
        return cls()

    def for_class(self, asset_class: AssetClass) -> AssetClassTotals:
        return self.investments.get(asset_class, AssetClassTotals())

    def to_storage(self) -> dict[str, Any]:
        """Dump as the camelCase JSON document kept in storage."""
        return self.model_dump(mode="json", by_alias=True)