# tests/services/test_transaction_service.py
"""
Tests for the transaction repository.

Covers:
- Add / list / delete for every asset class
- Duplicate and missing ids
- Snapshot invalidation on every write
- Future acquisition dates rejected on add
- Malformed stored data, strict and skipping reads
- Legacy crypto records without ids
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from factories import make_crypto, make_fd, make_gold, make_mutual_fund, make_rd, make_stock
from portfolio_tracker.models import AssetClass
from portfolio_tracker.services.constants import SNAPSHOT_CACHE_KEY
from portfolio_tracker.services.exceptions import (
    InvalidTransactionError,
    StorageError,
    TransactionNotFoundError,
)
from portfolio_tracker.services.transaction_service import TransactionService


@pytest.fixture
def repo(store) -> TransactionService:
    return TransactionService(store)


# =============================================================================
# ADD AND LIST
# =============================================================================

class TestAddTransaction:

    async def test_list_missing_key_is_empty(self, repo):
        assert await repo.list_transactions(AssetClass.STOCK) == ()

    async def test_add_then_list(self, repo):
        stock = make_stock("TCS", "10", "100")
        await repo.add_transaction(stock)

        listed = await repo.list_transactions(AssetClass.STOCK)
        assert len(listed) == 1
        assert listed[0].id == stock.id
        assert listed[0].invested_amount == Decimal("1000")

    async def test_stored_as_camel_case(self, repo, store):
        await repo.add_transaction(make_stock("TCS"))
        raw = await store.get("transactions_stocks")
        assert "averagePrice" in raw[0]
        assert "investedOn" in raw[0]

    async def test_appends_in_order(self, repo):
        first, second = make_stock("TCS"), make_stock("INFY")
        await repo.add_transaction(first)
        await repo.add_transaction(second)

        listed = await repo.list_transactions(AssetClass.STOCK)
        assert [t.id for t in listed] == [first.id, second.id]

    @pytest.mark.parametrize(
        "factory,asset_class",
        [
            (make_rd, AssetClass.RECURRING_DEPOSIT),
            (make_fd, AssetClass.FIXED_DEPOSIT),
            (make_mutual_fund, AssetClass.MUTUAL_FUND),
            (make_crypto, AssetClass.CRYPTO),
            (make_gold, AssetClass.GOLD),
        ],
    )
    async def test_every_class_uses_its_key(self, repo, store, factory, asset_class):
        await repo.add_transaction(factory())
        assert len(await store.get(asset_class.storage_key)) == 1
        assert len(await repo.list_transactions(asset_class)) == 1

    async def test_future_acquisition_rejected(self, repo, store):
        future = datetime.now(timezone.utc) + timedelta(days=2)

        with pytest.raises(InvalidTransactionError, match="in the future"):
            await repo.add_transaction(make_stock(invested_on=future))

        assert await store.get("transactions_stocks") is None

    async def test_future_gold_purchase_rejected(self, repo):
        future = datetime.now(timezone.utc) + timedelta(days=2)
        with pytest.raises(InvalidTransactionError):
            await repo.add_transaction(make_gold(purchase_date=future))

    async def test_duplicate_id_rejected(self, repo):
        stock = make_stock("TCS")
        await repo.add_transaction(stock)
        with pytest.raises(InvalidTransactionError, match="already exists"):
            await repo.add_transaction(stock)

    async def test_concurrent_adds_all_kept(self, repo):
        stocks = [make_stock(f"S{i}") for i in range(10)]
        await asyncio.gather(*[repo.add_transaction(s) for s in stocks])
        assert len(await repo.list_transactions(AssetClass.STOCK)) == 10


# =============================================================================
# DELETE
# =============================================================================

class TestDeleteTransaction:

    async def test_delete(self, repo):
        keep, drop = make_gold(), make_gold()
        await repo.add_transaction(keep)
        await repo.add_transaction(drop)

        await repo.delete_transaction(AssetClass.GOLD, drop.id)

        listed = await repo.list_transactions(AssetClass.GOLD)
        assert [t.id for t in listed] == [keep.id]

    async def test_delete_missing(self, repo):
        await repo.add_transaction(make_fd())
        with pytest.raises(TransactionNotFoundError) as exc_info:
            await repo.delete_transaction(AssetClass.FIXED_DEPOSIT, "nope")
        assert exc_info.value.asset_class == "fd"

    async def test_delete_from_empty_class(self, repo):
        with pytest.raises(TransactionNotFoundError):
            await repo.delete_transaction(AssetClass.RECURRING_DEPOSIT, "1")

    async def test_delete_legacy_crypto_without_id(self, repo, store):
        await store.set("transactions_crypto", [{
            "coinId": "bitcoin",
            "symbol": "BTC",
            "name": "Bitcoin",
            "quantity": 0.5,
            "investmentAmount": 1000000,
            "timestamp": "2025-01-01T00:00:00Z",
        }])

        listed = await repo.list_transactions(AssetClass.CRYPTO)
        await repo.delete_transaction(AssetClass.CRYPTO, listed[0].id)

        assert await store.get("transactions_crypto") == []


# =============================================================================
# SNAPSHOT INVALIDATION
# =============================================================================

class TestInvalidation:

    async def test_add_removes_cached_snapshot(self, repo, store):
        await store.set(SNAPSHOT_CACHE_KEY, {"totalInvestment": 1.0})
        await repo.add_transaction(make_stock())
        assert await store.get(SNAPSHOT_CACHE_KEY) is None

    async def test_delete_removes_cached_snapshot(self, repo, store):
        stock = make_stock()
        await repo.add_transaction(stock)
        await store.set(SNAPSHOT_CACHE_KEY, {"totalInvestment": 1.0})

        await repo.delete_transaction(AssetClass.STOCK, stock.id)

        assert await store.get(SNAPSHOT_CACHE_KEY) is None

    async def test_failed_write_keeps_snapshot(self, repo, store):
        stock = make_stock()
        await repo.add_transaction(stock)
        await store.set(SNAPSHOT_CACHE_KEY, {"totalInvestment": 1.0})

        with pytest.raises(InvalidTransactionError):
            await repo.add_transaction(stock)

        assert await store.get(SNAPSHOT_CACHE_KEY) == {"totalInvestment": 1.0}

    async def test_clear_all(self, repo, store):
        await repo.add_transaction(make_stock())
        await repo.add_transaction(make_fd())
        await store.set(SNAPSHOT_CACHE_KEY, {"totalInvestment": 1.0})

        await repo.clear_all()

        assert store.keys() == []


# =============================================================================
# MALFORMED DATA
# =============================================================================

class TestMalformedData:

    async def test_non_list_value(self, repo, store):
        await store.set("transactions_stocks", {"not": "a list"})
        with pytest.raises(StorageError):
            await repo.list_transactions(AssetClass.STOCK)

    async def test_invalid_record(self, repo, store):
        await store.set("transactions_stocks", [{"symbol": "TCS"}])
        with pytest.raises(InvalidTransactionError) as exc_info:
            await repo.list_transactions(AssetClass.STOCK)
        assert exc_info.value.errors

    async def test_non_object_record(self, repo, store):
        await store.set("transactions_gold", ["junk"])
        with pytest.raises(InvalidTransactionError, match="not an object"):
            await repo.list_transactions(AssetClass.GOLD)

    async def test_skip_invalid_keeps_valid_records(self, repo, store, caplog):
        valid = make_stock("TCS", "10", "100")
        await store.set("transactions_stocks", [valid.to_storage(), {"symbol": "X"}, "junk"])

        listed = await repo.list_transactions(AssetClass.STOCK, skip_invalid=True)

        assert [t.id for t in listed] == [valid.id]
        assert "record 1" in caplog.text
        assert "record 2 is not an object" in caplog.text
