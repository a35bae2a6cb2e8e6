# portfolio_tracker/schemas/transactions.py
"""
Pydantic schemas for persisted transaction records.

One model per asset class, joined into a tagged union discriminated by
``asset_class``. Each variant carries exactly the fields its valuation rule
needs, so the valuation core never has to probe for optional keys.

Storage format:
    Records are stored as camelCase JSON (``investedOn``, ``averagePrice``,
    ``investmentAmount``...). Models accept snake_case or camelCase on input
    and dump camelCase with monetary values as JSON numbers.

Validation layers:
- Field constraints: positive finite quantities, percentage bounds
- Field validators: timestamp normalization to UTC, MF 4-decimal precision
- Model properties: instrument identity, pooled quantity, invested amount,
  acquisition time

Future acquisition dates are rejected by the transaction repository when a
record is added, not here: stored records are re-validated on every read.

IMPORTANT: All financial values use Decimal for precision.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from portfolio_tracker.models import AssetClass
from portfolio_tracker.services.analytics.interest import (
    calculate_fd_maturity,
    calculate_rd_maturity,
)
from portfolio_tracker.services.constants import HUNDRED, MF_PRECISION


# =============================================================================
# SHARED TYPES
# =============================================================================

# Decimal in memory, JSON number on disk
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

PositiveMoney = Annotated[
    Decimal,
    Field(gt=0, allow_inf_nan=False),
    PlainSerializer(float, return_type=float, when_used="json"),
]

Timestamp = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z"),
        return_type=str,
        when_used="json",
    ),
]


def _new_transaction_id() -> str:
    """Millisecond epoch id, matching ids of previously stored records."""
    return str(time.time_ns() // 1_000_000)


def _normalize_timestamp(value: Any) -> Any:
    """Accept date-only strings and naive datetimes; store everything as UTC."""
    if isinstance(value, str) and len(value) == 10:
        value = f"{value}T00:00:00"
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# BASE SCHEMA
# =============================================================================

class TransactionBase(BaseModel):
    """
    Fields common to every transaction variant.

    Transactions are immutable once created (frozen); they can only be
    removed from their list.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    id: str = Field(
        default_factory=_new_transaction_id,
        description="Record id, unique within its asset-class list"
    )
    description: str | None = Field(
        default=None,
        description="Free-text note"
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    def to_storage(self) -> dict[str, Any]:
        """Dump as the camelCase JSON document kept in storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class _DepositTransaction(TransactionBase):
    """Shared terms of recurring and fixed deposits."""

    name: str = Field(..., min_length=1, description="Deposit label (bank, scheme)")
    amount: PositiveMoney = Field(..., description="Principal or monthly installment")
    invested_on: Timestamp = Field(..., description="Deposit start date")
    duration: int = Field(..., gt=0, description="Term in months")
    roi: Money = Field(..., ge=0, allow_inf_nan=False, description="Annual interest rate in percent")
    maturity_amount: Money | None = Field(
        default=None,
        description="Maturity value materialized when the deposit was recorded"
    )

    normalize_invested_on = field_validator("invested_on", mode="before")(_normalize_timestamp)

    @property
    def instrument_id(self) -> str:
        return self.id

    @property
    def label(self) -> str:
        return self.name

    @property
    def quantity(self) -> Decimal:
        return self.amount

    @property
    def acquired_at(self) -> datetime:
        return self.invested_on


# =============================================================================
# VARIANTS
# =============================================================================

class RecurringDepositTransaction(_DepositTransaction):
    """A recurring deposit: ``amount`` is paid every month for ``duration`` months."""

    asset_class: Literal[AssetClass.RECURRING_DEPOSIT] = AssetClass.RECURRING_DEPOSIT

    @property
    def invested_amount(self) -> Decimal:
        """Total committed installments."""
        return self.amount * self.duration

    @property
    def maturity_value(self) -> Decimal:
        if self.maturity_amount is not None:
            return self.maturity_amount
        return calculate_rd_maturity(self.amount, self.duration, self.roi)


class FixedDepositTransaction(_DepositTransaction):
    """A fixed deposit earning simple interest on ``amount``."""

    asset_class: Literal[AssetClass.FIXED_DEPOSIT] = AssetClass.FIXED_DEPOSIT

    @property
    def invested_amount(self) -> Decimal:
        return self.amount

    @property
    def maturity_value(self) -> Decimal:
        if self.maturity_amount is not None:
            return self.maturity_amount
        return calculate_fd_maturity(self.amount, self.roi, self.duration)


class StockTransaction(TransactionBase):
    """A stock purchase; pooled by ``symbol``."""

    asset_class: Literal[AssetClass.STOCK] = AssetClass.STOCK
    symbol: str = Field(..., min_length=1, description="Exchange symbol without suffix")
    name: str = Field(..., min_length=1)
    quantity: PositiveMoney = Field(..., description="Shares bought")
    average_price: PositiveMoney = Field(..., description="Price paid per share")
    invested_on: Timestamp
    sector: str | None = None
    industry: str | None = None

    normalize_invested_on = field_validator("invested_on", mode="before")(_normalize_timestamp)

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def instrument_id(self) -> str:
        return self.symbol

    @property
    def label(self) -> str:
        return self.name

    @property
    def invested_amount(self) -> Decimal:
        return self.quantity * self.average_price

    @property
    def acquired_at(self) -> datetime:
        return self.invested_on


class SipDetails(BaseModel):
    """Systematic investment plan attached to a mutual fund purchase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    amount: PositiveMoney
    date: str = Field(..., description="Day of month the installment is debited")
    frequency: Literal["Monthly", "Quarterly", "Semi-Annually", "Annually"] = "Monthly"
    status: str = "Active"

    @field_validator("date")
    @classmethod
    def validate_sip_date(cls, v: str) -> str:
        if not v.isdigit() or not 1 <= int(v) <= 28:
            raise ValueError("SIP date must be a day between 1 and 28")
        return v


class MutualFundTransaction(TransactionBase):
    """A mutual fund purchase or imported holding; pooled by ``scheme_code``."""

    asset_class: Literal[AssetClass.MUTUAL_FUND] = AssetClass.MUTUAL_FUND
    scheme_code: str = Field(..., min_length=1)
    scheme_name: str = Field(..., min_length=1)
    fund_house: str | None = None
    scheme_type: str | None = None
    scheme_category: str | None = None
    nav_price: PositiveMoney = Field(..., description="NAV paid per unit")
    investment_amount: PositiveMoney
    units: PositiveMoney
    invested_on: Timestamp
    is_sip: bool = Field(default=False, alias="isSIP")
    sip_details: SipDetails | None = None
    is_imported: bool = False

    normalize_invested_on = field_validator("invested_on", mode="before")(_normalize_timestamp)

    @field_validator("scheme_code", mode="before")
    @classmethod
    def coerce_scheme_code(cls, v: Any) -> Any:
        # mfapi returns numeric codes
        return str(v) if isinstance(v, int) else v

    @field_validator("units", "nav_price")
    @classmethod
    def round_to_four_places(cls, v: Decimal) -> Decimal:
        return v.quantize(MF_PRECISION)

    @property
    def instrument_id(self) -> str:
        return self.scheme_code

    @property
    def label(self) -> str:
        return self.scheme_name

    @property
    def quantity(self) -> Decimal:
        return self.units

    @property
    def invested_amount(self) -> Decimal:
        return self.investment_amount

    @property
    def acquired_at(self) -> datetime:
        return self.invested_on


class CryptoTransaction(TransactionBase):
    """A cryptocurrency purchase; pooled by CoinGecko ``coin_id``."""

    asset_class: Literal[AssetClass.CRYPTO] = AssetClass.CRYPTO
    coin_id: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    quantity: PositiveMoney
    investment_amount: PositiveMoney
    purchase_price: Money | None = None
    timestamp: Timestamp

    normalize_timestamp = field_validator("timestamp", mode="before")(_normalize_timestamp)

    @model_validator(mode="before")
    @classmethod
    def derive_legacy_id(cls, data: Any) -> Any:
        # Older crypto records were stored without an id
        if isinstance(data, dict) and not data.get("id") and data.get("timestamp"):
            acquired = _normalize_timestamp(data["timestamp"])
            if isinstance(acquired, datetime):
                data = {**data, "id": str(int(acquired.timestamp() * 1000))}
        return data

    @property
    def instrument_id(self) -> str:
        return self.coin_id

    @property
    def label(self) -> str:
        return self.name

    @property
    def invested_amount(self) -> Decimal:
        return self.investment_amount

    @property
    def unit_cost(self) -> Decimal:
        if self.purchase_price is not None:
            return self.purchase_price
        return self.investment_amount / self.quantity

    @property
    def acquired_at(self) -> datetime:
        return self.timestamp


class GoldTransaction(TransactionBase):
    """A jewelry or bullion purchase; each item is its own position."""

    asset_class: Literal[AssetClass.GOLD] = AssetClass.GOLD
    jewelry_type: str = Field(..., min_length=1, description="Free-text item label")
    weight: PositiveMoney = Field(..., description="Gross weight in grams")
    purity: Money = Field(..., gt=0, le=100, allow_inf_nan=False, description="Purity in percent")
    investment_amount: PositiveMoney
    purchase_date: Timestamp
    hallmark: str | None = None
    store: str | None = None

    normalize_purchase_date = field_validator("purchase_date", mode="before")(_normalize_timestamp)

    @property
    def instrument_id(self) -> str:
        return self.id

    @property
    def label(self) -> str:
        return self.jewelry_type

    @property
    def quantity(self) -> Decimal:
        return self.weight

    @property
    def pure_weight(self) -> Decimal:
        """Grams of pure gold: weight × purity / 100."""
        return self.weight * self.purity / HUNDRED

    @property
    def invested_amount(self) -> Decimal:
        return self.investment_amount

    @property
    def acquired_at(self) -> datetime:
        return self.purchase_date


# =============================================================================
# TAGGED UNION
# =============================================================================

Transaction = Annotated[
    Union[
        RecurringDepositTransaction,
        FixedDepositTransaction,
        StockTransaction,
        MutualFundTransaction,
        CryptoTransaction,
        GoldTransaction,
    ],
    Field(discriminator="asset_class"),
]

TransactionAdapter: TypeAdapter[Transaction] = TypeAdapter(Transaction)

TRANSACTION_MODELS: dict[AssetClass, type[TransactionBase]] = {
    AssetClass.RECURRING_DEPOSIT: RecurringDepositTransaction,
    AssetClass.FIXED_DEPOSIT: FixedDepositTransaction,
    AssetClass.STOCK: StockTransaction,
    AssetClass.MUTUAL_FUND: MutualFundTransaction,
    AssetClass.CRYPTO: CryptoTransaction,
    AssetClass.GOLD: GoldTransaction,
}


def parse_transaction(asset_class: AssetClass, raw: dict[str, Any]) -> Transaction:
    """
    Validate one stored record as the variant of its asset-class list.

    Stored records do not carry the tag; the list they were read from does.

    Raises:
        pydantic.ValidationError: If the record is malformed
    """
    return TRANSACTION_MODELS[asset_class].model_validate(raw)
