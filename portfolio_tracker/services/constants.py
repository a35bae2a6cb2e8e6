# portfolio_tracker/services/constants.py
"""
Centralized constants for the portfolio tracker services.

This module provides a single source of truth for all business constants
used across the valuation core.

Usage:
    from portfolio_tracker.services.constants import (
        AVERAGE_MONTH_DAYS,
        XIRR_MAX_ITERATIONS,
    )
"""

from decimal import Decimal


ZERO: Decimal = Decimal("0")
ONE: Decimal = Decimal("1")
HUNDRED: Decimal = Decimal("100")


# =============================================================================
# CALENDAR CONSTANTS
# =============================================================================

# Average month length used to convert elapsed time into months for FD/RD
# accrual. Drifts up to ~1.5 days per month against the calendar; kept so
# values match previously cached snapshots.
AVERAGE_MONTH_DAYS: Decimal = Decimal("30.44")

MONTHS_PER_YEAR: Decimal = Decimal("12")

# Day count basis for XIRR discounting
CALENDAR_DAYS_PER_YEAR: int = 365


# =============================================================================
# XIRR CALCULATION SETTINGS
# =============================================================================

# Maximum iterations for the Newton-Raphson solver
XIRR_MAX_ITERATIONS: int = 100

# Convergence tolerance on |NPV|, also used as the forward-difference step
XIRR_TOLERANCE: float = 1e-7

# Initial guess (10% annual return)
XIRR_INITIAL_GUESS: float = 0.1


# =============================================================================
# PRECISION
# =============================================================================

# Deposit maturity and accrued values are materialized in whole rupees
RUPEE: Decimal = Decimal("1")

# Mutual fund units and NAV are stored with 4 decimal places
MF_PRECISION: Decimal = Decimal("0.0001")

# Result precision for XIRR percentage
PERCENT_PRECISION: Decimal = Decimal("0.01")


# =============================================================================
# GOLD
# =============================================================================

# Gold rates are quoted per 10 grams
GOLD_QUOTE_GRAMS: Decimal = Decimal("10")


# =============================================================================
# STORAGE KEYS
# =============================================================================

# Cached portfolio snapshot (transaction list keys live on AssetClass)
SNAPSHOT_CACHE_KEY: str = "portfolioData"


# =============================================================================
# MARKET HOURS (IST)
# =============================================================================

MARKET_TIMEZONE: str = "Asia/Kolkata"
MARKET_OPEN: tuple[int, int] = (9, 15)
MARKET_CLOSE: tuple[int, int] = (15, 30)
