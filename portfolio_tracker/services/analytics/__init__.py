# portfolio_tracker/services/analytics/__init__.py
"""
Financial math primitives: returns, XIRR and deposit interest.

Usage:
    from portfolio_tracker.services.analytics import calculate_xirr, CashFlow
"""

from portfolio_tracker.services.analytics.interest import (
    calculate_fd_current_value,
    calculate_fd_maturity,
    calculate_rd_current_value,
    calculate_rd_maturity,
    maturity_date,
    months_elapsed,
)
from portfolio_tracker.services.analytics.returns import (
    calculate_allocation,
    calculate_gain_percentage,
    calculate_return_percentage,
    calculate_xirr,
)
from portfolio_tracker.services.analytics.types import CashFlow, MonthArithmetic

__all__ = [
    "CashFlow",
    "MonthArithmetic",
    "calculate_allocation",
    "calculate_fd_current_value",
    "calculate_fd_maturity",
    "calculate_gain_percentage",
    "calculate_rd_current_value",
    "calculate_rd_maturity",
    "calculate_return_percentage",
    "calculate_xirr",
    "maturity_date",
    "months_elapsed",
]
