# portfolio_tracker/storage/base.py
"""
Abstract key-value store for JSON documents.

The store holds two kinds of values:
- transaction lists, one per asset class (``transactions_<id>``)
- the cached portfolio snapshot (``portfolioData``)

Values are plain JSON (dicts, lists, numbers, strings). A missing key reads
as None; callers turn that into an empty list or a zeroed snapshot.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from portfolio_tracker.services.exceptions import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """
    Async get/set/remove over JSON values.

    Subclasses implement the raw operations; this base validates that
    written values are JSON-serializable so every backend rejects the same
    inputs.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """
        Read a value.

        Returns:
            The stored JSON value, or None if the key is missing

        Raises:
            StorageError: Backend failure
        """
        pass

    @abstractmethod
    async def _write(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    async def remove(self, keys: list[str]) -> None:
        """Delete keys; missing keys are ignored."""
        pass

    async def set(self, key: str, value: Any) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            StorageError: Value is not JSON-serializable or backend failure
        """
        try:
            json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not JSON-serializable: {e}", key=key)
        await self._write(key, value)
        logger.debug(f"Stored '{key}'")
