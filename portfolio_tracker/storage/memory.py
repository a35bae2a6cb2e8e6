# portfolio_tracker/storage/memory.py
"""In-process key-value store, used by tests and ephemeral sessions."""

import copy
from typing import Any

from portfolio_tracker.storage.base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dict-backed store.

    Values are deep-copied on the way in and out so callers can never
    mutate stored state through a returned reference.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str) -> Any | None:
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    async def _write(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def remove(self, keys: list[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
