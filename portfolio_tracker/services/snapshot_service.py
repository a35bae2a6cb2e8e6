# portfolio_tracker/services/snapshot_service.py
"""
Portfolio snapshot builder.

Builds the dashboard snapshot from the six transaction lists:

    1. Read the six lists concurrently (fail-soft: records that do not
       validate are skipped, an unreadable list counts as empty; both warn)
    2. Wait for all six (barrier) before any cross-class total
    3. Value each class (quotes fetched concurrently inside each class)
    4. Sum per-class totals, compute allocation shares
    5. Overwrite the ``portfolioData`` cache key

The snapshot is a pure function of the persisted transactions, the quotes
and ``as_of``: two builds over unchanged inputs produce identical output.

Usage:
    builder = SnapshotBuilder(store, ValuationService(fetchers))
    snapshot = await builder.build_snapshot()
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError

from portfolio_tracker.models import AssetClass
from portfolio_tracker.schemas.snapshot import AssetClassTotals, PortfolioSnapshot
from portfolio_tracker.schemas.transactions import Transaction
from portfolio_tracker.services.analytics.returns import (
    calculate_allocation,
    calculate_return_percentage,
)
from portfolio_tracker.services.constants import SNAPSHOT_CACHE_KEY, ZERO
from portfolio_tracker.services.exceptions import ServiceError, StorageError
from portfolio_tracker.services.protocols import KeyValueStoreProtocol
from portfolio_tracker.services.transaction_service import TransactionService
from portfolio_tracker.services.valuation.service import ValuationService
from portfolio_tracker.services.valuation.types import AssetClassValuation
from portfolio_tracker.utils.context import snapshot_run
from portfolio_tracker.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class SnapshotBuilder:
    """
    Builds and caches the portfolio snapshot.

    Attributes:
        _store: Key-value store holding lists and the cache
        _transactions: Repository used to read validated lists
        _valuation: Per-class valuation service
    """

    def __init__(
            self,
            store: KeyValueStoreProtocol,
            valuation_service: ValuationService | None = None,
    ) -> None:
        self._store = store
        self._transactions = TransactionService(store)
        self._valuation = valuation_service or ValuationService()

    async def build_snapshot(self, as_of: datetime | None = None) -> PortfolioSnapshot:
        """
        Rebuild the snapshot from storage and overwrite the cache.

        Args:
            as_of: Valuation timestamp (default: now). Fix it for
                   reproducible output.

        Returns:
            The new PortfolioSnapshot

        Raises:
            StorageError: The cache could not be written
        """
        as_of = as_of or utc_now()

        with snapshot_run() as run_id:
            logger.info(f"Building portfolio snapshot (run {run_id})")

            lists = await asyncio.gather(*[
                self._read_class(asset_class) for asset_class in AssetClass
            ])
            valuations = await asyncio.gather(*[
                self._valuation.value_asset_class(asset_class, transactions, as_of)
                for asset_class, transactions in zip(AssetClass, lists)
            ])

            snapshot = self._assemble(valuations)
            await self._store.set(SNAPSHOT_CACHE_KEY, snapshot.to_storage())

            logger.info(
                f"Snapshot built: invested={snapshot.total_investment}, "
                f"current={snapshot.current_value}"
            )
            return snapshot

    async def get_cached_snapshot(self) -> PortfolioSnapshot:
        """
        Return the cached snapshot, or a zeroed one when none is usable.
        """
        try:
            raw = await self._store.get(SNAPSHOT_CACHE_KEY)
        except StorageError as e:
            logger.warning(f"Cached snapshot unreadable: {e}")
            return PortfolioSnapshot.empty()

        if raw is None:
            return PortfolioSnapshot.empty()
        try:
            return PortfolioSnapshot.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning(f"Cached snapshot invalid ({e.error_count()} errors); ignoring it")
            return PortfolioSnapshot.empty()

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _read_class(self, asset_class: AssetClass) -> tuple[Transaction, ...]:
        """Read one list, dropping bad records; an unreadable list reads as empty."""
        try:
            return await self._transactions.list_transactions(asset_class, skip_invalid=True)
        except ServiceError as e:
            logger.warning(f"Treating {asset_class.value} as empty: {e}")
            return ()

    @staticmethod
    def _assemble(valuations: list[AssetClassValuation]) -> PortfolioSnapshot:
        total_investment = sum((v.summary.total_invested for v in valuations), ZERO)
        current_value = sum((v.summary.total_current_value for v in valuations), ZERO)

        investments = {
            v.asset_class: AssetClassTotals(
                total=v.summary.total_invested,
                count=v.transaction_count,
                current_value=v.summary.total_current_value,
                allocation_percentage=calculate_allocation(
                    v.summary.total_current_value, current_value
                ),
            )
            for v in valuations
        }

        return PortfolioSnapshot(
            total_investment=total_investment,
            current_value=current_value,
            total_gain=current_value - total_investment,
            gain_percentage=calculate_return_percentage(current_value, total_investment),
            investments=investments,
        )
