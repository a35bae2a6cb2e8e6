# portfolio_tracker/storage/__init__.py
"""
Key-value storage backends.

Usage:
    from portfolio_tracker.storage import InMemoryKeyValueStore

    store = InMemoryKeyValueStore()
    await store.set("transactions_fd", [...])
"""

from portfolio_tracker.storage.base import KeyValueStore
from portfolio_tracker.storage.memory import InMemoryKeyValueStore
from portfolio_tracker.storage.sql import SqlKeyValueStore

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SqlKeyValueStore",
]
