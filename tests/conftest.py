# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Key-value store fixtures (in-memory and SQLite)
- Fake quote source fixture
- A fixed valuation timestamp
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone
from typing import Iterator

import pytest
from sqlalchemy import Engine

from factories import FakeQuoteSource
from portfolio_tracker.database import create_session_factory, create_store_engine, init_db
from portfolio_tracker.models import Base
from portfolio_tracker.storage.memory import InMemoryKeyValueStore
from portfolio_tracker.storage.sql import SqlKeyValueStore


# =============================================================================
# STORAGE FIXTURES
# =============================================================================

@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture(scope="function")
def db_engine() -> Iterator[Engine]:
    """Create an in-memory SQLite database engine for testing."""
    engine = create_store_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture
def sql_store(db_engine) -> SqlKeyValueStore:
    """Key-value store backed by the in-memory SQLite engine."""
    return SqlKeyValueStore(create_session_factory(db_engine))


# =============================================================================
# QUOTES AND TIME
# =============================================================================

@pytest.fixture
def quotes() -> FakeQuoteSource:
    """Fake quote source with no prices configured."""
    return FakeQuoteSource()


@pytest.fixture
def as_of() -> datetime:
    """Fixed valuation timestamp for reproducible deposit accrual."""
    return datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
