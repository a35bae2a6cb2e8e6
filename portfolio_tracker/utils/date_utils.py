# portfolio_tracker/utils/date_utils.py
"""
Date utility functions for the portfolio tracker.

This module provides shared date manipulation functions used by the deposit
accrual math and the transaction schemas. Centralizing these keeps month
arithmetic consistent between maturity dates and elapsed-month counts.

Usage:
    from portfolio_tracker.utils.date_utils import add_months

    maturity = add_months(invested_on, 12)
"""

import calendar
from datetime import datetime, timezone
from decimal import Decimal


def ensure_utc(value: datetime) -> datetime:
    """
    Return an aware UTC datetime.

    Naive datetimes are interpreted as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def add_months(start: datetime, months: int) -> datetime:
    """
    Add calendar months, clamping the day to the end of the target month.

    Args:
        start: Starting timestamp
        months: Number of months to add (may be negative)

    Returns:
        Timestamp with the same time of day, months later

    Example:
        >>> add_months(datetime(2024, 1, 31), 1)
        datetime(2024, 2, 29)  # Leap year, day clamped
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def calendar_months_between(start: datetime, end: datetime) -> Decimal:
    """
    Count calendar months from start to end, with a fractional remainder.

    Whole months are counted by calendar addition; the remainder is the
    elapsed share of the following month. Returns 0 when end <= start.

    Example:
        >>> calendar_months_between(datetime(2024, 1, 15), datetime(2024, 3, 1))
        Decimal("1.55...")  # One whole month, then 15 of 29 days
    """
    start = ensure_utc(start)
    end = ensure_utc(end)
    if end <= start:
        return Decimal("0")

    whole = (end.year - start.year) * 12 + (end.month - start.month)
    if add_months(start, whole) > end:
        whole -= 1

    anchor = add_months(start, whole)
    next_anchor = add_months(start, whole + 1)
    span = Decimal(str((next_anchor - anchor).total_seconds()))
    elapsed = Decimal(str((end - anchor).total_seconds()))
    return Decimal(whole) + elapsed / span
