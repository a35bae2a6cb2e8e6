# portfolio_tracker/services/refresh.py
"""
Periodic quote refresh bound to a visible scope.

A detail view refreshes its valuation every ``interval`` seconds while it
is visible. The refresher is an async context manager: entering the scope
starts a background task, leaving it cancels the task. Nothing keeps
refreshing after the scope is gone.

Usage:
    async with PeriodicRefresher(refresh_stocks, should_run=is_indian_market_open):
        await view_closed.wait()
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time
from typing import Awaitable, Callable
from zoneinfo import ZoneInfo

from portfolio_tracker.config import settings
from portfolio_tracker.services.constants import MARKET_CLOSE, MARKET_OPEN, MARKET_TIMEZONE
from portfolio_tracker.utils.date_utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def is_indian_market_open(now: datetime | None = None) -> bool:
    """
    True between 09:15 and 15:30 IST inclusive.

    Weekends and exchange holidays are not excluded.
    """
    local = ensure_utc(now or utc_now()).astimezone(ZoneInfo(MARKET_TIMEZONE))
    return time(*MARKET_OPEN) <= local.time() <= time(*MARKET_CLOSE)


class PeriodicRefresher:
    """
    Runs ``callback`` every ``interval`` seconds while the scope is open.

    The first run happens immediately on entry. A run is skipped when
    ``should_run`` returns False. Exceptions raised by the callback are
    logged and the loop continues.

    Attributes:
        runs: Number of completed callback invocations
    """

    def __init__(
            self,
            callback: Callable[[], Awaitable[object]],
            interval: float | None = None,
            should_run: Callable[[], bool] | None = None,
    ) -> None:
        interval = interval if interval is not None else settings.quote_refresh_interval_seconds
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._callback = callback
        self._interval = interval
        self._should_run = should_run
        self._task: asyncio.Task[None] | None = None
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def __aenter__(self) -> PeriodicRefresher:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name="periodic-refresh")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            if self._should_run is None or self._should_run():
                try:
                    await self._callback()
                    self.runs += 1
                except Exception:
                    logger.exception("Periodic refresh failed")
            await asyncio.sleep(self._interval)
