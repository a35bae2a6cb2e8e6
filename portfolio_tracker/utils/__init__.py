# portfolio_tracker/utils/__init__.py
"""
Shared utilities: logging, run context, dates and display formatting.
"""

from portfolio_tracker.utils.context import get_run_id, snapshot_run
from portfolio_tracker.utils.formatting import format_currency, format_percentage
from portfolio_tracker.utils.logging import setup_logging

__all__ = [
    "format_currency",
    "format_percentage",
    "get_run_id",
    "setup_logging",
    "snapshot_run",
]
