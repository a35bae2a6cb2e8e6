# portfolio_tracker/services/market_data/mfapi.py
"""
mfapi.in NAV provider for Indian mutual funds.

``GET /mf/<scheme_code>`` returns the scheme's NAV history, newest first:

    {"meta": {...}, "data": [{"date": "17-10-2026", "nav": "45.1234"}, ...]}

The latest entry is the current NAV; the day change is measured against
the entry before it (4 decimal places, percentage to 2 places).
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

import httpx

from portfolio_tracker.config import settings
from portfolio_tracker.services.constants import (
    HUNDRED,
    MF_PRECISION,
    PERCENT_PRECISION,
    ZERO,
)
from portfolio_tracker.services.exceptions import (
    InstrumentNotFoundError,
    QuoteParseError,
)
from portfolio_tracker.services.market_data.base import NAVQuote
from portfolio_tracker.services.market_data.http import HttpQuoteProvider

logger = logging.getLogger(__name__)

NAV_DATE_FORMAT = "%d-%m-%Y"


class MfApiNavProvider(HttpQuoteProvider):
    """mfapi.in implementation of the NAV fetcher."""

    def __init__(
            self,
            base_url: str | None = None,
            timeout: float | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url or settings.mfapi_base_url, timeout, transport)

    @property
    def name(self) -> str:
        return "mfapi"

    async def __call__(self, scheme_code: str) -> NAVQuote:
        return await self.get_nav(scheme_code)

    async def get_nav(self, scheme_code: str) -> NAVQuote:
        """
        Fetch the latest NAV of a scheme.

        Raises:
            InstrumentNotFoundError: Unknown scheme or no NAV history
            QuoteParseError: Malformed NAV entries
            ProviderUnavailableError: Network or API error (retryable)
        """
        return await self._execute_with_retry(self._fetch_nav, str(scheme_code))

    async def _fetch_nav(self, scheme_code: str) -> NAVQuote:
        logger.debug(f"Fetching NAV for scheme {scheme_code}")
        response = await self._get(f"/mf/{scheme_code}", instrument_id=scheme_code)
        try:
            payload = response.json()
        except ValueError as e:
            raise QuoteParseError(self.name, f"invalid JSON: {e}")

        history = payload.get("data") if isinstance(payload, dict) else None
        if not history:
            raise InstrumentNotFoundError(scheme_code, self.name)

        latest = history[0]
        current_nav = self._to_decimal(latest.get("nav"))
        if current_nav is None or current_nav <= ZERO:
            raise QuoteParseError(self.name, f"invalid NAV for scheme {scheme_code}")

        previous_nav = current_nav
        if len(history) > 1:
            previous_nav = self._to_decimal(history[1].get("nav")) or current_nav

        try:
            nav_date = datetime.strptime(latest.get("date", ""), NAV_DATE_FORMAT).date()
        except ValueError as e:
            raise QuoteParseError(self.name, f"invalid NAV date: {e}")

        change = current_nav - previous_nav
        return NAVQuote(
            scheme_code=scheme_code,
            current_nav=current_nav,
            nav_date=nav_date,
            change_abs=change.quantize(MF_PRECISION, rounding=ROUND_HALF_UP),
            change_pct=(change / previous_nav * HUNDRED).quantize(
                PERCENT_PRECISION, rounding=ROUND_HALF_UP
            ),
        )
