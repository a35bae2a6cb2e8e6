# portfolio_tracker/services/transaction_service.py
"""
Transaction repository over the key-value store.

Each asset class keeps its transactions as one JSON list under
``transactions_<id>``. Writes read the list, change it and write it back,
so concurrent writers of the same key are serialized by a per-key lock.
The lock only covers writers sharing this repository instance.

Every write removes the cached portfolio snapshot; the next dashboard view
rebuilds it from the lists. Cached totals are never patched by hand.

Usage:
    repo = TransactionService(store)
    await repo.add_transaction(StockTransaction(symbol="TCS", ...))
    await repo.delete_transaction(AssetClass.STOCK, "1718000000000")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from portfolio_tracker.models import AssetClass
from portfolio_tracker.schemas.transactions import (
    Transaction,
    TransactionBase,
    parse_transaction,
)
from portfolio_tracker.services.constants import SNAPSHOT_CACHE_KEY
from portfolio_tracker.services.exceptions import (
    InvalidTransactionError,
    StorageError,
    TransactionNotFoundError,
)
from portfolio_tracker.services.protocols import KeyValueStoreProtocol
from portfolio_tracker.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class TransactionService:
    """
    List, add and delete transactions of any asset class.

    Attributes:
        _store: Injected key-value store
        _locks: One write lock per storage key
    """

    def __init__(self, store: KeyValueStoreProtocol) -> None:
        self._store = store
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    # =========================================================================
    # READ
    # =========================================================================

    async def list_transactions(
            self,
            asset_class: AssetClass,
            skip_invalid: bool = False,
    ) -> tuple[Transaction, ...]:
        """
        Read and validate the transaction list of one asset class.

        Args:
            asset_class: List to read
            skip_invalid: Log and drop records that do not validate instead
                of failing the whole read

        Returns:
            Transactions in storage order; empty when the key is missing

        Raises:
            InvalidTransactionError: A stored record does not validate and
                skip_invalid is False
            StorageError: The stored value is not a list, or backend failure
        """
        raw_list = await self._read_raw(asset_class)

        transactions: list[Transaction] = []
        for index, raw in enumerate(raw_list):
            try:
                transactions.append(self._validate(asset_class, raw, index))
            except InvalidTransactionError as e:
                if not skip_invalid:
                    raise
                logger.warning(f"Skipping stored {asset_class.value} record: {e}")
        return tuple(transactions)

    async def _read_raw(self, asset_class: AssetClass) -> list[dict[str, Any]]:
        value = await self._store.get(asset_class.storage_key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise StorageError(
                f"Expected a list under '{asset_class.storage_key}', got {type(value).__name__}",
                key=asset_class.storage_key,
            )
        return value

    @staticmethod
    def _validate(asset_class: AssetClass, raw: Any, index: int) -> Transaction:
        if not isinstance(raw, dict):
            raise InvalidTransactionError(asset_class.value, f"record {index} is not an object")
        try:
            return parse_transaction(asset_class, raw)
        except PydanticValidationError as e:
            raise InvalidTransactionError(
                asset_class.value,
                f"record {index}: {e.error_count()} validation error(s)",
                errors=e.errors(include_url=False),
            )

    @staticmethod
    def _record_id(asset_class: AssetClass, raw: Any) -> str | None:
        """Id of a stored record, including ids derived for legacy records."""
        if not isinstance(raw, dict):
            return None
        if raw.get("id") is not None:
            return str(raw["id"])
        try:
            return parse_transaction(asset_class, raw).id
        except PydanticValidationError:
            return None

    # =========================================================================
    # WRITE
    # =========================================================================

    async def add_transaction(self, transaction: TransactionBase) -> Transaction:
        """
        Append a transaction to its asset-class list.

        Args:
            transaction: A validated transaction model

        Returns:
            The stored transaction

        Raises:
            InvalidTransactionError: The acquisition date is in the future,
                or the id is already used in the list
        """
        asset_class = transaction.asset_class
        key = asset_class.storage_key

        if transaction.acquired_at > utc_now():
            raise InvalidTransactionError(
                asset_class.value,
                f"acquisition date {transaction.acquired_at.isoformat()} is in the future",
            )

        async with self._lock_for(key):
            raw_list = await self._read_raw(asset_class)
            if any(self._record_id(asset_class, raw) == transaction.id for raw in raw_list):
                raise InvalidTransactionError(
                    asset_class.value, f"id '{transaction.id}' already exists"
                )
            raw_list.append(transaction.to_storage())
            await self._store.set(key, raw_list)

        await self.invalidate_snapshot()
        logger.info(f"Added {asset_class.value} transaction {transaction.id}")
        return transaction

    async def delete_transaction(self, asset_class: AssetClass, transaction_id: str) -> None:
        """
        Remove one transaction by id. Works the same for every asset class.

        Raises:
            TransactionNotFoundError: No transaction with that id
        """
        key = asset_class.storage_key

        async with self._lock_for(key):
            raw_list = await self._read_raw(asset_class)
            remaining = [
                raw for raw in raw_list
                if self._record_id(asset_class, raw) != str(transaction_id)
            ]
            if len(remaining) == len(raw_list):
                raise TransactionNotFoundError(asset_class.value, str(transaction_id))
            await self._store.set(key, remaining)

        await self.invalidate_snapshot()
        logger.info(f"Deleted {asset_class.value} transaction {transaction_id}")

    async def clear_all(self) -> None:
        """Remove every transaction list and the cached snapshot."""
        keys = [asset_class.storage_key for asset_class in AssetClass]
        await self._store.remove(keys + [SNAPSHOT_CACHE_KEY])
        logger.info("Cleared all transactions and the cached snapshot")

    async def invalidate_snapshot(self) -> None:
        await self._store.remove([SNAPSHOT_CACHE_KEY])
