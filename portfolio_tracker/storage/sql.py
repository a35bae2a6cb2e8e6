# portfolio_tracker/storage/sql.py
"""
SQLAlchemy-backed key-value store.

Each key is one row of ``kv_store`` with a JSON value column. SQLAlchemy
sessions are blocking, so every operation runs in a worker thread via
``asyncio.to_thread`` and gets its own short-lived session.

Usage:
    engine = create_store_engine()
    init_db(engine)
    store = SqlKeyValueStore(create_session_factory(engine))
"""

import asyncio
import logging
from typing import Any

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from portfolio_tracker.models import KeyValueEntry
from portfolio_tracker.services.exceptions import StorageError
from portfolio_tracker.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class SqlKeyValueStore(KeyValueStore):
    """Key-value store persisted in a relational database."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> Any | None:
        return await asyncio.to_thread(self._get_sync, key)

    async def _write(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set_sync, key, value)

    async def remove(self, keys: list[str]) -> None:
        if keys:
            await asyncio.to_thread(self._remove_sync, keys)

    # =========================================================================
    # BLOCKING OPERATIONS (worker thread)
    # =========================================================================

    def _get_sync(self, key: str) -> Any | None:
        try:
            with self._session_factory() as session:
                entry = session.get(KeyValueEntry, key)
                return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read '{key}': {e}")
            raise StorageError(f"Failed to read '{key}': {e}", key=key)

    def _set_sync(self, key: str, value: Any) -> None:
        try:
            with self._session_factory() as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to write '{key}': {e}")
            raise StorageError(f"Failed to write '{key}': {e}", key=key)

    def _remove_sync(self, keys: list[str]) -> None:
        try:
            with self._session_factory() as session:
                session.execute(delete(KeyValueEntry).where(KeyValueEntry.key.in_(keys)))
                session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to remove {keys}: {e}")
            raise StorageError(f"Failed to remove {keys}: {e}")
