# portfolio_tracker/utils/formatting.py
"""
Display formatting for INR amounts and percentages.

Indian digit grouping puts the first comma after three digits and every
following comma after two: 12,34,56,789.00.

Usage:
    from portfolio_tracker.utils.formatting import format_currency

    format_currency(Decimal("1234567.5"))   # "₹12,34,567.50"
"""

from decimal import Decimal, ROUND_HALF_UP

RUPEE_SYMBOL = "₹"


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(amount: Decimal | int | float | None, decimals: int = 2) -> str:
    """
    Format an amount as rupees with Indian grouping.

    Args:
        amount: Value to format; None renders as "₹0"
        decimals: Fraction digits (0 for whole rupees)

    Returns:
        e.g. "₹1,00,000.00", "-₹250.50"
    """
    if amount is None:
        return f"{RUPEE_SYMBOL}0"

    value = Decimal(str(amount))
    quantum = Decimal(1).scaleb(-decimals)
    value = value.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    integer_part, _, fraction = f"{abs(value):.{decimals}f}".partition(".")
    text = _group_indian(integer_part)
    if decimals > 0:
        text = f"{text}.{fraction}"
    return f"{sign}{RUPEE_SYMBOL}{text}"


def format_percentage(value: Decimal | int | float | None, decimals: int = 2) -> str:
    """Format a percentage, e.g. "12.50%"; None renders as "0%"."""
    if value is None:
        return "0%"
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{rounded:.{decimals}f}%"
