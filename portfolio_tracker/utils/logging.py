# portfolio_tracker/utils/logging.py
"""
Logging configuration for the portfolio tracker.

This module provides centralized logging setup with:
- Configurable log level (DEBUG for development, INFO otherwise)
- Snapshot run id on every record
- JSON format option for machine-readable logs
- Suppression of noisy third-party library logs

Usage:
    from portfolio_tracker.utils import setup_logging

    setup_logging()

Log Levels:
    DEBUG   - Quote fetches, per-class valuation details
    INFO    - Snapshot built, transactions added or deleted
    WARNING - Recoverable issues (missing quotes, retries, unreadable lists)
    ERROR   - Storage or provider failures

Environment Configuration:
    LOG_LEVEL=DEBUG
    LOG_FORMAT=json       # machine-readable logs
    LOG_FORMAT=text       # human-readable logs (default)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from portfolio_tracker.config import settings
from portfolio_tracker.utils.context import get_run_id

# =============================================================================
# CONSTANTS
# =============================================================================

# timestamp | level | run_id | logger_name | message
DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(run_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_RUN_ID = "-"

NOISY_LOGGERS = [
    "yfinance",
    "urllib3",
    "urllib3.connectionpool",
    "httpx",
    "httpcore",
    "peewee",
    "asyncio",
]

_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "run_id", "message", "taskName",
}


# =============================================================================
# RUN ID FILTER
# =============================================================================

class RunIdFilter(logging.Filter):
    """Adds the current snapshot run id to every record as ``run_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = get_run_id() or NO_RUN_ID
        return True


# =============================================================================
# JSON FORMATTER
# =============================================================================

class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Output format:
    {
        "timestamp": "2026-01-15T10:30:00.123+00:00",
        "level": "WARNING",
        "logger": "portfolio_tracker.services.valuation.service",
        "run_id": "3f9a1c2b7d4e",
        "message": "Quote fetch failed for stocks 'TCS': ...",
        "extra": { ... }
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "run_id": getattr(record, "run_id", NO_RUN_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                try:
                    json.dumps(value)
                    extra[key] = value
                except (TypeError, ValueError):
                    extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


# =============================================================================
# SETUP FUNCTION
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure process-wide logging with run id support.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.log_level.
        log_format: 'text' or 'json'. Defaults to settings.log_format.
        suppress_noisy_loggers: If True, set third-party loggers to WARNING

    Raises:
        ValueError: Unknown level name
    """
    log_level_str = level or settings.log_level
    log_level = _get_log_level(log_level_str)

    format_type = log_format or settings.log_format

    if format_type.lower() == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt=DEFAULT_TEXT_FORMAT,
            datefmt=DEFAULT_DATE_FORMAT,
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(RunIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy_loggers:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={log_level_str}, format={format_type}"
    )


def _get_log_level(level_str: str) -> int:
    """
    Convert string log level to logging constant.

    Raises:
        ValueError: If level_str is not a valid log level
    """
    level_str = level_str.upper().strip()

    level_mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str not in level_mapping:
        valid_levels = ", ".join(level_mapping.keys())
        raise ValueError(
            f"Invalid log level: '{level_str}'. "
            f"Valid levels are: {valid_levels}"
        )

    return level_mapping[level_str]
