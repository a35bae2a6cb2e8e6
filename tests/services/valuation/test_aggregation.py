# tests/services/valuation/test_aggregation.py
"""
Tests for pooling, ordering and totals.

Key scenarios:
- Stocks, mutual funds and crypto pool by instrument
- Deposits and gold stay one position per transaction
- First-occurrence order and representative metadata
- Sort keys and the unknown-key error
"""

from decimal import Decimal

import pytest

from factories import make_crypto, make_fd, make_gold, make_mutual_fund, make_stock
from portfolio_tracker.services.exceptions import ValidationError
from portfolio_tracker.services.valuation.aggregation import (
    SortKey,
    aggregate,
    empty_summary,
    sort_valuations,
    summarize,
)
from portfolio_tracker.services.valuation.types import InstrumentValuation


def _valuation(position, current: str, day_change: str = "0") -> InstrumentValuation:
    current_value = Decimal(current)
    gain = current_value - position.invested_amount
    return InstrumentValuation(
        position=position,
        current_value=current_value,
        gain_amount=gain,
        gain_percentage=Decimal("0"),
        day_change_amount=Decimal(day_change),
        day_change_percentage=Decimal("0"),
    )


# =============================================================================
# POOLING
# =============================================================================

class TestAggregate:
    """Tests for aggregate function."""

    def test_pools_same_symbol(self):
        """10 @ 100 and 5 @ 120 become one position of 15 costing 1600."""
        positions = aggregate([
            make_stock("TCS", "10", "100"),
            make_stock("TCS", "5", "120"),
        ])

        assert len(positions) == 1
        position = positions[0]
        assert position.instrument_id == "TCS"
        assert position.quantity == Decimal("15")
        assert position.invested_amount == Decimal("1600")
        assert position.transaction_count == 2

    def test_distinct_symbols_stay_apart(self):
        positions = aggregate([make_stock("TCS"), make_stock("INFY")])
        assert [p.instrument_id for p in positions] == ["TCS", "INFY"]

    def test_first_occurrence_order(self):
        positions = aggregate([
            make_stock("INFY"),
            make_stock("TCS"),
            make_stock("INFY"),
        ])
        assert [p.instrument_id for p in positions] == ["INFY", "TCS"]

    def test_representative_is_first_transaction(self):
        first = make_stock("TCS", name="Tata Consultancy")
        second = make_stock("TCS", name="TCS Ltd (renamed)")
        position = aggregate([first, second])[0]

        assert position.representative is first
        assert position.name == "Tata Consultancy"

    def test_mutual_funds_pool_by_scheme(self):
        positions = aggregate([
            make_mutual_fund("119551", units="100", amount="5000"),
            make_mutual_fund("119551", units="50", amount="2600"),
        ])
        assert len(positions) == 1
        assert positions[0].quantity == Decimal("150")
        assert positions[0].invested_amount == Decimal("7600")

    def test_crypto_pools_by_coin(self):
        positions = aggregate([
            make_crypto("bitcoin", "0.5", "1000000"),
            make_crypto("bitcoin", "0.25", "600000"),
        ])
        assert positions[0].quantity == Decimal("0.75")
        assert positions[0].invested_amount == Decimal("1600000")

    def test_gold_never_pooled(self):
        positions = aggregate([make_gold(), make_gold()])
        assert len(positions) == 2
        assert all(p.transaction_count == 1 for p in positions)

    def test_deposits_never_pooled(self):
        first, second = make_fd(), make_fd()
        positions = aggregate([first, second])
        assert [p.instrument_id for p in positions] == [first.id, second.id]

    def test_empty(self):
        assert aggregate([]) == []


# =============================================================================
# ORDERING
# =============================================================================

class TestSortValuations:
    """Tests for sort_valuations function."""

    @pytest.fixture
    def valuations(self):
        positions = aggregate([
            make_stock("TCS", "10", "100", name="tata"),
            make_stock("INFY", "10", "100", name="Infosys"),
            make_stock("WIPRO", "10", "100", name="Wipro"),
        ])
        return [
            _valuation(positions[0], "1500"),   # gain 500
            _valuation(positions[1], "900"),    # gain -100
            _valuation(positions[2], "1200"),   # gain 200
        ]

    def test_by_name_case_insensitive(self, valuations):
        result = sort_valuations(valuations, SortKey.NAME)
        assert [v.name for v in result] == ["Infosys", "tata", "Wipro"]

    def test_by_profit_loss_descending(self, valuations):
        result = sort_valuations(valuations, SortKey.PROFIT_LOSS)
        assert [v.gain_amount for v in result] == [Decimal("500"), Decimal("200"), Decimal("-100")]

    def test_by_current_value_descending(self, valuations):
        result = sort_valuations(valuations, "current_value")
        assert [v.current_value for v in result] == [Decimal("1500"), Decimal("1200"), Decimal("900")]

    def test_input_not_mutated(self, valuations):
        before = list(valuations)
        sort_valuations(valuations, SortKey.NAME)
        assert valuations == before

    def test_unknown_key(self, valuations):
        with pytest.raises(ValidationError) as exc_info:
            sort_valuations(valuations, "market_cap")
        assert exc_info.value.field == "sort_by"


# =============================================================================
# TOTALS
# =============================================================================

class TestSummarize:
    """Tests for summarize function."""

    def test_sums(self):
        positions = aggregate([make_stock("TCS", "10", "100"), make_stock("INFY", "10", "100")])
        summary = summarize([
            _valuation(positions[0], "1500", day_change="50"),
            _valuation(positions[1], "900", day_change="-10"),
        ])

        assert summary.total_invested == Decimal("2000")
        assert summary.total_current_value == Decimal("2400")
        assert summary.total_gain == Decimal("400")
        assert summary.total_gain_percentage == Decimal("20")
        assert summary.total_day_change == Decimal("40")
        # 40 against the previous value of 2360
        assert summary.total_day_change_percentage == Decimal("40") / Decimal("2360") * 100
        assert summary.position_count == 2

    def test_empty_summary_is_zeroed(self):
        summary = empty_summary()
        assert summary.total_invested == Decimal("0")
        assert summary.total_gain_percentage == Decimal("0")
        assert summary.total_day_change_percentage == Decimal("0")
        assert summary.position_count == 0
