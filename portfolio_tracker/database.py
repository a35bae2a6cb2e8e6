# portfolio_tracker/database.py
"""
Database connection and session management for the key-value store.

This module configures SQLAlchemy with:
- SQLite by default (file-backed, or in-memory for tests)
- Any other SQLAlchemy URL with pre-ping health checks
- Table creation on first use

Usage:
    from portfolio_tracker.database import create_store_engine, init_db

    engine = create_store_engine()
    init_db(engine)
"""

import logging

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .config import settings
from .models import Base

logger = logging.getLogger(__name__)


def create_store_engine(database_url: str | None = None) -> Engine:
    """
    Create SQLAlchemy engine with configuration appropriate for the URL.

    Args:
        database_url: SQLAlchemy URL. Defaults to settings.database_url.

    Returns:
        Engine: Configured SQLAlchemy engine

    Configuration varies by database type:
    - SQLite: check_same_thread=False because store calls run in worker
      threads; in-memory databases share one connection via StaticPool
    - Others: default pool with pre-ping
    """
    url = database_url or settings.database_url

    if url.lower().startswith("sqlite://"):
        logger.info("Configuring SQLite key-value store")
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.lower() == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    logger.info("Configuring key-value store at %s", url.split("@")[-1])
    return create_engine(url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to the engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables defined in models."""
    Base.metadata.create_all(bind=engine)
    logger.debug("Key-value store tables ensured")


def check_database_health(engine: Engine) -> dict:
    """
    Check store connectivity.

    Returns:
        dict: Health status with backend info
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "database": engine.dialect.name,
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
        }
