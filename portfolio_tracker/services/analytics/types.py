# portfolio_tracker/services/analytics/types.py
"""
Data types for the analytics math.

All types use Decimal for financial precision.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Literal


MonthArithmetic = Literal["average", "calendar"]


@dataclass(frozen=True)
class CashFlow:
    """
    Represents a cash flow event for XIRR calculations.

    Attributes:
        when: Timestamp of the flow
        amount: Negative = money invested, Positive = money returned
                (the current value is the final positive flow)
    """
    when: datetime
    amount: Decimal
