# portfolio_tracker/services/market_data/http.py
"""
Shared HTTP plumbing for the httpx-based quote providers.

Translates transport failures and HTTP status codes into the
MarketDataError hierarchy so the retry policy in QuoteProvider can tell
transient failures from permanent ones:

    timeout / connection error  -> ProviderUnavailableError (retried)
    429                         -> RateLimitError (retried)
    404                         -> InstrumentNotFoundError
    5xx and other non-2xx       -> ProviderUnavailableError (retried)
"""

import logging
from typing import Any

import httpx

from portfolio_tracker.config import settings
from portfolio_tracker.services.exceptions import (
    InstrumentNotFoundError,
    ProviderUnavailableError,
    RateLimitError,
)
from portfolio_tracker.services.market_data.base import QuoteProvider

logger = logging.getLogger(__name__)


class HttpQuoteProvider(QuoteProvider):
    """
    Base class for providers that talk to an HTTP endpoint.

    A new AsyncClient is opened per request. Tests inject an
    ``httpx.MockTransport`` through ``transport``.
    """

    DEFAULT_HEADERS: dict[str, str] = {"Accept": "application/json"}

    def __init__(
            self,
            base_url: str,
            timeout: float | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else settings.quote_timeout_seconds
        self._transport = transport
        logger.info(f"{type(self).__name__} initialized (timeout={self._timeout}s)")

    async def _get(
            self,
            path: str,
            params: dict[str, Any] | None = None,
            instrument_id: str | None = None,
    ) -> httpx.Response:
        """
        GET ``path`` relative to the base URL.

        Args:
            path: Path or absolute URL
            params: Query parameters
            instrument_id: Reported in InstrumentNotFoundError on a 404

        Returns:
            The successful response

        Raises:
            ProviderUnavailableError: Network error, timeout or server error
            RateLimitError: HTTP 429
            InstrumentNotFoundError: HTTP 404
        """
        url = path if path.startswith("http") else f"{self._base_url}{path}"

        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
            headers=self.DEFAULT_HEADERS,
            follow_redirects=True,
        ) as client:
            try:
                response = await client.get(url, params=params)
            except httpx.TimeoutException as e:
                raise ProviderUnavailableError(self.name, f"timeout: {e}")
            except httpx.RequestError as e:
                raise ProviderUnavailableError(self.name, f"network error: {e}")

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code == 404:
            raise InstrumentNotFoundError(instrument_id or url, self.name)
        if response.status_code >= 400:
            raise ProviderUnavailableError(self.name, f"HTTP {response.status_code}")

        return response
