# portfolio_tracker/services/analytics/interest.py
"""
Deposit interest math for fixed and recurring deposits.

Formulas:
    FD maturity = P × (1 + r/100 × n/12)             (simple interest)
    RD maturity = P × n × (1 + (n + 1) × i / 2)      i = r / 1200

    FD current  = P × (1 + r/100 × m/12)             m = months elapsed
    RD current  = P × d × (1 + (d + 1) × i / 2)      d = min(floor(m), n)

Both current values are clamped to the maturity value once the calendar
maturity date has passed; accrual is never extrapolated past it.

Month measurement:
    "average"  - elapsed time divided by a 30.44-day month (default)
    "calendar" - calendar months plus the elapsed share of the next month

All results are rounded to whole rupees (ROUND_HALF_UP).
"""

import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from portfolio_tracker.services.analytics.types import MonthArithmetic
from portfolio_tracker.services.constants import (
    AVERAGE_MONTH_DAYS,
    HUNDRED,
    MONTHS_PER_YEAR,
    ONE,
    RUPEE,
    ZERO,
)
from portfolio_tracker.utils.date_utils import (
    add_months,
    calendar_months_between,
    ensure_utc,
)

_SECONDS_PER_AVERAGE_MONTH = AVERAGE_MONTH_DAYS * Decimal(24 * 60 * 60)


def _to_rupees(value: Decimal) -> Decimal:
    return value.quantize(RUPEE, rounding=ROUND_HALF_UP)


# =============================================================================
# MATURITY
# =============================================================================

def calculate_fd_maturity(
        principal: Decimal,
        annual_rate: Decimal,
        duration_months: int,
) -> Decimal:
    """
    Maturity value of a fixed deposit under simple interest.

    Args:
        principal: Amount deposited
        annual_rate: Annual interest rate in percent (e.g., 7 for 7%)
        duration_months: Term in months

    Returns:
        Maturity value in whole rupees

    Example:
        >>> calculate_fd_maturity(Decimal("100000"), Decimal("7"), 12)
        Decimal("107000")
    """
    value = principal * (ONE + annual_rate / HUNDRED * Decimal(duration_months) / MONTHS_PER_YEAR)
    return _to_rupees(value)


def calculate_rd_maturity(
        installment: Decimal,
        months: int,
        annual_rate: Decimal,
) -> Decimal:
    """
    Maturity value of a recurring deposit paying ``installment`` monthly.

    Returns the installment itself when fewer than one month is given.

    Example:
        >>> calculate_rd_maturity(Decimal("1000"), 12, Decimal("6"))
        Decimal("12390")
    """
    if months < 1:
        return installment

    monthly_rate = annual_rate / Decimal("1200")
    n = Decimal(months)
    value = installment * n * (ONE + (n + ONE) * monthly_rate / 2)
    return _to_rupees(value)


def maturity_date(start: datetime, duration_months: int) -> datetime:
    """Calendar maturity date: start plus ``duration_months`` months."""
    return add_months(ensure_utc(start), duration_months)


# =============================================================================
# ELAPSED TIME
# =============================================================================

def months_elapsed(
        start: datetime,
        now: datetime,
        mode: MonthArithmetic = "average",
) -> Decimal:
    """
    Months elapsed between start and now, as a non-negative Decimal.

    Args:
        start: Deposit start
        now: Valuation timestamp
        mode: "average" (30.44-day months) or "calendar"

    Returns:
        Fractional months; 0 when now is not after start
    """
    start = ensure_utc(start)
    now = ensure_utc(now)
    if now <= start:
        return ZERO

    if mode == "calendar":
        return calendar_months_between(start, now)

    elapsed = Decimal(str((now - start).total_seconds()))
    return elapsed / _SECONDS_PER_AVERAGE_MONTH


# =============================================================================
# CURRENT VALUE
# =============================================================================

def calculate_fd_current_value(
        principal: Decimal,
        annual_rate: Decimal,
        duration_months: int,
        start: datetime,
        now: datetime,
        mode: MonthArithmetic = "average",
        maturity_amount: Decimal | None = None,
) -> Decimal:
    """
    Accrued value of a fixed deposit at ``now``.

    Interest accrues linearly with elapsed months. Once the elapsed months
    reach the term, or on or after the maturity date, the maturity value is
    returned (the stored one when given).

    Args:
        principal: Amount deposited
        annual_rate: Annual interest rate in percent
        duration_months: Term in months
        start: Deposit start
        now: Valuation timestamp
        mode: Month measurement
        maturity_amount: Maturity value recorded with the deposit, if any

    Returns:
        Current value in whole rupees
    """
    months = months_elapsed(start, now, mode)
    # Average months can reach the term a little before the calendar date
    if months >= duration_months or ensure_utc(now) >= maturity_date(start, duration_months):
        if maturity_amount is not None:
            return maturity_amount
        return calculate_fd_maturity(principal, annual_rate, duration_months)

    value =principal * (ONE + annual_rate / HUNDRED * months / MONTHS_PER_YEAR)
    return _to_rupees(value)


def calculate_rd_current_value(
        installment: Decimal,
        annual_rate: Decimal,
        duration_months: int,
        start: datetime,
        now: datetime,
        mode: MonthArithmetic = "average",
        maturity_amount: Decimal | None = None,
) -> Decimal:
    """
    Accrued value of a recurring deposit at ``now``.

    Only whole installments count: before the first full month the value is
    one installment; afterwards the RD formula is applied to the number of
    installments made so far (capped at the term).
    """
    if ensure_utc(now) >= maturity_date(start, duration_months):
        if maturity_amount is not None:
            return maturity_amount
        return calculate_rd_maturity(installment, duration_months, annual_rate)

    months = months_elapsed(start, now, mode)
    if months < ONE:
        return installment

    deposits_made = min(math.floor(months), duration_months)
    return calculate_rd_maturity(installment, deposits_made, annual_rate)
