# portfolio_tracker/services/analytics/returns.py
"""
Return calculation functions.

This module contains pure functions for the portfolio's return metrics:
- Return percentage: (Current - Invested) / Invested
- Gain percentage: Gain / Invested
- Allocation: Part / Total
- Extended IRR (XIRR): money-weighted annual return with exact dates

All functions are stateless and never raise on degenerate input: any
percentage with a zero denominator is 0, never NaN or an exception.

Formulas:
    Return % = (Current - Invested) / Invested × 100

    XIRR solves: Σ CF_i / (1 + r)^(days_i / 365) = 0

Precision Note (Decimal vs Float):
    The XIRR Newton-Raphson solver operates entirely in float because it
    needs non-integer exponents in every iteration. The result is converted
    back to Decimal and rounded to 2 decimal places of percent. Every other
    function here stays in Decimal.
"""

import logging
import math
from decimal import Decimal, ROUND_HALF_UP

from portfolio_tracker.services.analytics.types import CashFlow
from portfolio_tracker.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    HUNDRED,
    PERCENT_PRECISION,
    XIRR_INITIAL_GUESS,
    XIRR_MAX_ITERATIONS,
    XIRR_TOLERANCE,
    ZERO,
)

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 24 * 60 * 60


# =============================================================================
# SIMPLE RETURNS
# =============================================================================

def calculate_return_percentage(current_value: Decimal, invested: Decimal) -> Decimal:
    """
    Calculate the simple percentage return of a holding.

    Formula: (Current - Invested) / Invested × 100

    Args:
        current_value: Current market value
        invested: Cost basis

    Returns:
        Return in percent, or 0 when either operand is 0
    """
    if current_value == ZERO or invested == ZERO:
        return ZERO
    return (current_value - invested) / invested * HUNDRED


def calculate_gain_percentage(gain: Decimal, invested: Decimal) -> Decimal:
    """
    Express an absolute gain as a percentage of the cost basis.

    Returns 0 when invested is 0.
    """
    if invested == ZERO:
        return ZERO
    return gain / invested * HUNDRED


def calculate_allocation(part: Decimal, total: Decimal) -> Decimal:
    """Share of total in percent; 0 when total is 0."""
    if total == ZERO:
        return ZERO
    return part / total * HUNDRED


# =============================================================================
# EXTENDED IRR (XIRR)
# =============================================================================

def _npv(rate: float, flows: list[tuple[int, float]]) -> float:
    """
    Net present value of (days, amount) flows at an annual rate.

    Raises:
        OverflowError: If a discount factor overflows
        ValueError: If the rate leaves the real domain
    """
    base = 1.0 + rate
    if base <= 0:
        raise ValueError(f"Discount base {base} is not positive")

    npv = 0.0
    for days, amount in flows:
        npv += amount / base ** (days / CALENDAR_DAYS_PER_YEAR)

    if not math.isfinite(npv):
        raise ValueError("NPV is not finite")
    return npv


def calculate_xirr(
        cash_flows: list[CashFlow],
        max_iterations: int = XIRR_MAX_ITERATIONS,
        tolerance: float = XIRR_TOLERANCE,
) -> Decimal:
    """
    Calculate Extended Internal Rate of Return (XIRR).

    XIRR is the annual discount rate that makes the NPV of all cash flows
    equal to zero.

    Formula:
        Solve for r: Σ CF_i / (1 + r)^(days_i / 365) = 0

    Flows are taken in the order given (chronological by convention). Day
    offsets are the rounded absolute distance in days from the first flow.

    Solver: Newton-Raphson from 10%, with the derivative estimated by a
    forward difference of step ``tolerance``. Stops when |NPV| < tolerance or
    after ``max_iterations``. A step that produces a non-finite NPV or rate
    aborts the search and the last finite rate is used.

    Args:
        cash_flows: List of CashFlow (when, amount)
                   - Negative = money invested
                   - Positive = money returned / current value
        max_iterations: Maximum solver iterations
        tolerance: Convergence threshold on |NPV| and difference step

    Returns:
        XIRR in percent rounded to 2 places (e.g., Decimal("10.00")),
        or 0 when fewer than 2 flows are given

    Example:
        cash_flows = [
            CashFlow(datetime(2023, 1, 1), Decimal("-10000")),
            CashFlow(datetime(2024, 1, 1), Decimal("11000")),
        ]
        calculate_xirr(cash_flows)  # Decimal("10.00")
    """
    if len(cash_flows) < 2:
        return ZERO

    first = cash_flows[0].when
    flows = [
        (
            round(abs((cf.when - first).total_seconds()) / _SECONDS_PER_DAY),
            float(cf.amount),
        )
        for cf in cash_flows
    ]

    rate = XIRR_INITIAL_GUESS
    try:
        npv = _npv(rate, flows)
    except (OverflowError, ValueError, ZeroDivisionError):
        logger.warning("XIRR: NPV undefined at the initial guess")
        return ZERO

    iteration = 0
    while abs(npv) > tolerance and iteration < max_iterations:
        try:
            slope = (_npv(rate + tolerance, flows) - npv) / tolerance
            new_rate = rate - npv / slope
            if not math.isfinite(new_rate):
                break
            new_npv = _npv(new_rate, flows)
        except (OverflowError, ValueError, ZeroDivisionError):
            break

        rate, npv = new_rate, new_npv
        iteration += 1

    if abs(npv) > tolerance:
        logger.debug(f"XIRR stopped after {iteration} iterations at rate {rate:.6f}")

    return (Decimal(str(rate)) * HUNDRED).quantize(PERCENT_PRECISION, rounding=ROUND_HALF_UP)
