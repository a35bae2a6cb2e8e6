# portfolio_tracker/services/market_data/gold.py
"""
Gold rate provider scraping goodreturns.in.

The city page carries a rate table (CSS class ``table-conatiner``, sic)
whose body rows are ``grams | today | yesterday | change``. The row for
10 grams is the reference quote.

No fallback price is ever invented: when the page cannot be read or the
row is missing, the fetch raises and gold is valued without a quote.
"""

import html
import logging
import re
from datetime import datetime, timezone
from decimal import Decimal

import httpx

from portfolio_tracker.config import settings
from portfolio_tracker.services.exceptions import QuoteParseError
from portfolio_tracker.services.market_data.base import GoldQuote
from portfolio_tracker.services.market_data.http import HttpQuoteProvider

logger = logging.getLogger(__name__)

_TABLE_RE = re.compile(
    r'<table[^>]*class="[^"]*table-conatiner[^"]*"[^>]*>(.*?)</table>',
    re.IGNORECASE | re.DOTALL,
)
_TBODY_RE = re.compile(r"<tbody[^>]*>(.*?)</tbody>", re.IGNORECASE | re.DOTALL)
_ROW_RE = re.compile(r"<tr[^>]*>(.*?)</tr>", re.IGNORECASE | re.DOTALL)
_CELL_RE = re.compile(r"<td[^>]*>(.*?)</td>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_NON_NUMERIC_RE = re.compile(r"[^0-9.]")

REFERENCE_GRAMS = "10"


def _cell_text(cell: str) -> str:
    return html.unescape(_TAG_RE.sub("", cell)).strip()


def _parse_amount(text: str) -> Decimal | None:
    """Strip the rupee sign, grouping commas and whitespace."""
    cleaned = _NON_NUMERIC_RE.sub("", text)
    if not cleaned:
        return None
    try:
        return Decimal(cleaned)
    except ArithmeticError:
        return None


def parse_gold_rate_table(page: str) -> tuple[Decimal, Decimal]:
    """
    Extract today's and yesterday's 10 g rate from a goodreturns page.

    Returns:
        (today, yesterday)

    Raises:
        QuoteParseError: Table, body or 10 g row not found, or unparseable
    """
    table = _TABLE_RE.search(page)
    if table is None:
        raise QuoteParseError("goodreturns", "gold rate table not found")

    body = _TBODY_RE.search(table.group(1))
    if body is None:
        raise QuoteParseError("goodreturns", "table body not found")

    for row in _ROW_RE.findall(body.group(1)):
        cells = [_cell_text(c) for c in _CELL_RE.findall(row)]
        if len(cells) < 4 or cells[0] != REFERENCE_GRAMS:
            continue

        today = _parse_amount(cells[1])
        yesterday = _parse_amount(cells[2])
        if today is None or yesterday is None:
            raise QuoteParseError("goodreturns", f"invalid price cells {cells[1:3]}")
        return today, yesterday

    raise QuoteParseError("goodreturns", "10 gram rate not found in table")


class GoodReturnsGoldProvider(HttpQuoteProvider):
    """goodreturns.in implementation of the gold price fetcher."""

    DEFAULT_HEADERS = {
        "User-Agent": "Mozilla/5.0",
        "Accept": "text/html,application/xhtml+xml",
    }

    def __init__(
            self,
            url: str | None = None,
            timeout: float | None = None,
            transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url or settings.gold_rates_url
        super().__init__(self._url, timeout, transport)

    @property
    def name(self) -> str:
        return "goodreturns"

    async def __call__(self) -> GoldQuote:
        return await self.get_quote()

    async def get_quote(self) -> GoldQuote:
        """
        Fetch the 24K rate per 10 g.

        Raises:
            QuoteParseError: The page layout did not match
            ProviderUnavailableError: Network or server error (retryable)
        """
        return await self._execute_with_retry(self._fetch_quote)

    async def _fetch_quote(self) -> GoldQuote:
        logger.debug(f"Fetching gold rates from {self._url}")
        response = await self._get(self._url)
        today, yesterday = parse_gold_rate_table(response.text)

        return GoldQuote(
            price_per_10g=today,
            previous_price_per_10g=yesterday,
            change_abs=today - yesterday,
            as_of=datetime.now(timezone.utc),
        )
