# tests/services/test_snapshot_service.py
"""
Integration tests for the portfolio snapshot builder.

Test Scenarios:
1. Totals equal the sums over asset classes
2. Allocation shares and the cache write
3. Reproducible output for a fixed as_of
4. Unreadable lists degrade to empty classes
5. Cached snapshot reads
"""

from decimal import Decimal

import pytest

from factories import make_fd, make_gold, make_stock
from portfolio_tracker.models import AssetClass
from portfolio_tracker.schemas.snapshot import PortfolioSnapshot
from portfolio_tracker.services.constants import SNAPSHOT_CACHE_KEY
from portfolio_tracker.services.snapshot_service import SnapshotBuilder
from portfolio_tracker.services.valuation.service import ValuationService


@pytest.fixture
def builder(store, quotes) -> SnapshotBuilder:
    return SnapshotBuilder(store, ValuationService(quotes.fetchers()))


async def _seed(store, *transactions) -> None:
    lists: dict[str, list] = {}
    for transaction in transactions:
        lists.setdefault(transaction.asset_class.storage_key, []).append(transaction.to_storage())
    for key, value in lists.items():
        await store.set(key, value)


# =============================================================================
# BUILD
# =============================================================================

class TestBuildSnapshot:

    async def test_empty_portfolio(self, builder, as_of):
        snapshot = await builder.build_snapshot(as_of)

        assert snapshot.total_investment == Decimal("0")
        assert snapshot.current_value == Decimal("0")
        assert snapshot.gain_percentage == Decimal("0")
        assert set(snapshot.investments) == set(AssetClass)

    async def test_totals(self, builder, store, quotes, as_of):
        """1000 of TCS now worth 1500, plus a matured 100000 FD worth 107000."""
        quotes.set_stock("TCS", "150")
        await _seed(store, make_stock("TCS", "10", "100"), make_fd("100000", "7", 12))

        snapshot = await builder.build_snapshot(as_of)

        assert snapshot.total_investment == Decimal("101000")
        assert snapshot.current_value == Decimal("108500")
        assert snapshot.total_gain == Decimal("7500")
        assert snapshot.gain_percentage == Decimal("7500") / Decimal("101000") * 100

        stocks = snapshot.for_class(AssetClass.STOCK)
        assert stocks.total == Decimal("1000")
        assert stocks.current_value == Decimal("1500")
        assert stocks.count == 1
        assert stocks.allocation_percentage == Decimal("1500") / Decimal("108500") * 100

        fd = snapshot.for_class(AssetClass.FIXED_DEPOSIT)
        assert fd.current_value == Decimal("107000")

        assert snapshot.for_class(AssetClass.GOLD).count == 0

    async def test_totals_are_sums_over_classes(self, builder, store, quotes, as_of):
        quotes.set_stock("TCS", "150")
        quotes.set_gold("70000", "69500")
        await _seed(
            store,
            make_stock("TCS", "10", "100"),
            make_stock("TCS", "5", "120"),
            make_gold(),
            make_fd(),
        )

        snapshot = await builder.build_snapshot(as_of)

        entries = snapshot.investments.values()
        assert snapshot.total_investment == sum((e.total for e in entries), Decimal("0"))
        assert snapshot.current_value == sum((e.current_value for e in entries), Decimal("0"))
        assert snapshot.for_class(AssetClass.STOCK).count == 2

    async def test_allocations_sum_to_100(self, builder, store, quotes, as_of):
        quotes.set_stock("TCS", "150")
        await _seed(store, make_stock("TCS"), make_fd(), make_gold())

        snapshot = await builder.build_snapshot(as_of)

        total = sum((e.allocation_percentage for e in snapshot.investments.values()), Decimal("0"))
        assert abs(total - Decimal("100")) < Decimal("0.000001")

    async def test_writes_cache(self, builder, store, quotes, as_of):
        quotes.set_stock("TCS", "150")
        await _seed(store, make_stock("TCS"))

        snapshot = await builder.build_snapshot(as_of)

        cached = await store.get(SNAPSHOT_CACHE_KEY)
        assert cached == snapshot.to_storage()
        assert cached["totalInvestment"] == 1000.0
        assert cached["investments"]["stocks"]["currentValue"] == 1500.0

    async def test_reproducible(self, builder, store, quotes, as_of):
        quotes.set_stock("TCS", "150")
        await _seed(store, make_stock("TCS"), make_fd())

        first = await builder.build_snapshot(as_of)
        second = await builder.build_snapshot(as_of)

        assert first == second
        assert first.to_storage() == second.to_storage()


# =============================================================================
# DEGRADED INPUTS
# =============================================================================

class TestDegradedInputs:

    async def test_non_list_class_treated_as_empty(self, builder, store, as_of):
        await store.set("transactions_stocks", "garbage")
        await _seed(store, make_fd())

        snapshot = await builder.build_snapshot(as_of)

        assert snapshot.for_class(AssetClass.STOCK).count == 0
        assert snapshot.for_class(AssetClass.FIXED_DEPOSIT).current_value == Decimal("107000")

    async def test_invalid_record_skipped_valid_kept(self, builder, store, as_of, caplog):
        await store.set(
            "transactions_stocks",
            [make_stock("TCS", "10", "100").to_storage(), {"symbol": "X"}],
        )
        await _seed(store, make_fd())

        snapshot = await builder.build_snapshot(as_of)

        stocks = snapshot.for_class(AssetClass.STOCK)
        assert stocks.total == Decimal("1000")
        assert stocks.count == 1
        assert snapshot.total_investment == Decimal("101000")
        assert "Skipping stored stocks record" in caplog.text
        assert "record 1" in caplog.text

    async def test_non_list_value_treated_as_empty(self, builder, store, as_of, caplog):
        await store.set("transactions_gold", {"weight": 1})
        await _seed(store, make_fd())

        snapshot = await builder.build_snapshot(as_of)

        assert snapshot.for_class(AssetClass.GOLD).total == Decimal("0")
        assert snapshot.total_investment == Decimal("100000")
        assert "Treating gold as empty" in caplog.text

    async def test_old_record_with_future_date_still_counted(self, builder, store, as_of):
        # Stored records are not re-checked against the clock
        future = make_stock("INFY", "2", "50").to_storage()
        future["investedOn"] = "2099-01-01"
        await store.set("transactions_stocks", [future])

        snapshot = await builder.build_snapshot(as_of)

        assert snapshot.for_class(AssetClass.STOCK).total == Decimal("100")

    async def test_missing_quotes_hold_at_cost(self, builder, store, as_of):
        await _seed(store, make_stock("TCS", "10", "100"))

        snapshot = await builder.build_snapshot(as_of)

        assert snapshot.current_value == Decimal("1000")
        assert snapshot.total_gain == Decimal("0")


# =============================================================================
# CACHED SNAPSHOT
# =============================================================================

class TestCachedSnapshot:

    async def test_no_cache(self, builder):
        assert await builder.get_cached_snapshot() == PortfolioSnapshot.empty()

    async def test_after_build(self, builder, store, quotes, as_of):
        quotes.set_stock("TCS", "150")
        await _seed(store, make_stock("TCS"))
        await builder.build_snapshot(as_of)

        cached = await builder.get_cached_snapshot()

        assert cached.total_investment == Decimal("1000")
        assert cached.for_class(AssetClass.STOCK).current_value == Decimal("1500")

    async def test_invalid_cache(self, builder, store):
        await store.set(SNAPSHOT_CACHE_KEY, {"totalInvestment": "lots"})
        assert await builder.get_cached_snapshot() == PortfolioSnapshot.empty()
