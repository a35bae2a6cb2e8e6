# tests/services/analytics/test_returns.py
"""
Unit tests for return calculations.

These tests verify the pure calculation logic WITHOUT storage or quotes.
All tests use known values that can be verified by hand.

Test Coverage:
- calculate_return_percentage: Simple return with zero guards
- calculate_gain_percentage: Gain over cost basis
- calculate_allocation: Share of total
- calculate_xirr: Extended Internal Rate of Return
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from portfolio_tracker.services.analytics.returns import (
    calculate_allocation,
    calculate_gain_percentage,
    calculate_return_percentage,
    calculate_xirr,
)
from portfolio_tracker.services.analytics.types import CashFlow

D0 = datetime(2023, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# SIMPLE RETURN TESTS
# =============================================================================

class TestReturnPercentage:
    """Tests for calculate_return_percentage function."""

    def test_positive_return(self):
        """Test positive return calculation."""
        assert calculate_return_percentage(Decimal("1200"), Decimal("1000")) == Decimal("20")

    def test_negative_return(self):
        """Test negative return calculation."""
        assert calculate_return_percentage(Decimal("800"), Decimal("1000")) == Decimal("-20")

    def test_zero_invested_returns_zero(self):
        """Zero cost basis must not divide by zero."""
        assert calculate_return_percentage(Decimal("500"), Decimal("0")) == Decimal("0")

    def test_zero_current_value_returns_zero(self):
        """Zero current value reads as no return, not -100%."""
        assert calculate_return_percentage(Decimal("0"), Decimal("1000")) == Decimal("0")


class TestGainPercentage:
    """Tests for calculate_gain_percentage function."""

    def test_gain_over_invested(self):
        assert calculate_gain_percentage(Decimal("650"), Decimal("1600")) == Decimal("40.625")

    def test_loss(self):
        assert calculate_gain_percentage(Decimal("-250"), Decimal("1000")) == Decimal("-25")

    def test_zero_invested(self):
        assert calculate_gain_percentage(Decimal("100"), Decimal("0")) == Decimal("0")


class TestAllocation:
    """Tests for calculate_allocation function."""

    def test_share_of_total(self):
        assert calculate_allocation(Decimal("25"), Decimal("100")) == Decimal("25")

    def test_zero_total(self):
        assert calculate_allocation(Decimal("25"), Decimal("0")) == Decimal("0")


# =============================================================================
# XIRR TESTS
# =============================================================================

class TestXIRR:
    """Tests for calculate_xirr function."""

    def test_simple_one_year_return(self):
        """10% gain over exactly one year is an XIRR of 10%."""
        cash_flows = [
            CashFlow(when=D0, amount=Decimal("-10000")),
            CashFlow(when=D0 + timedelta(days=365), amount=Decimal("11000")),
        ]
        assert calculate_xirr(cash_flows) == Decimal("10.00")

    def test_loss_is_negative(self):
        """A 20% loss over one year yields -20%."""
        cash_flows = [
            CashFlow(when=D0, amount=Decimal("-10000")),
            CashFlow(when=D0 + timedelta(days=365), amount=Decimal("8000")),
        ]
        assert calculate_xirr(cash_flows) == Decimal("-20.00")

    def test_two_year_compounding(self):
        """21% total over two years is 10% a year."""
        cash_flows = [
            CashFlow(when=D0, amount=Decimal("-10000")),
            CashFlow(when=D0 + timedelta(days=730), amount=Decimal("12100")),
        ]
        assert calculate_xirr(cash_flows) == Decimal("10.00")

    def test_multiple_deposits(self):
        """Money-weighted return lies between the flows' simple returns."""
        cash_flows = [
            CashFlow(when=D0, amount=Decimal("-10000")),
            CashFlow(when=D0 + timedelta(days=182), amount=Decimal("-10000")),
            CashFlow(when=D0 + timedelta(days=365), amount=Decimal("21500")),
        ]
        result = calculate_xirr(cash_flows)
        assert Decimal("8") < result < Decimal("12")

    def test_result_has_two_decimal_places(self):
        cash_flows = [
            CashFlow(when=D0, amount=Decimal("-1000")),
            CashFlow(when=D0 + timedelta(days=200), amount=Decimal("1037")),
        ]
        assert calculate_xirr(cash_flows).as_tuple().exponent == -2

    def test_single_flow_returns_zero(self):
        """Fewer than two flows cannot define a rate."""
        assert calculate_xirr([CashFlow(when=D0, amount=Decimal("-1000"))]) == Decimal("0")

    def test_empty_returns_zero(self):
        assert calculate_xirr([]) == Decimal("0")

    def test_iteration_cap_does_not_raise(self):
        """Stopping early returns the last finite estimate."""
        cash_flows = [
            CashFlow(when=D0, amount=Decimal("-10000")),
            CashFlow(when=D0 + timedelta(days=365), amount=Decimal("11000")),
        ]
        result = calculate_xirr(cash_flows, max_iterations=0)
        assert result == Decimal("10.00")
