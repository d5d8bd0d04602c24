"""
Database connection and session management.

Uses SQLite with aiosqlite for async support. The engine is created on
startup only when the sqlite cache backend is selected.
"""

import os
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from fxpulse.db.models import Base
from fxpulse.core.config import settings

logger = logging.getLogger(__name__)

# Default data directory: <backend>/data
DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "data")

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def default_database_url() -> str:
    """SQLite URL from settings, creating the data directory if needed."""
    sqlite_path = settings.sqlite_path
    if not sqlite_path:
        os.makedirs(DATA_DIR, exist_ok=True)
        sqlite_path = os.path.join(DATA_DIR, "fxpulse.db")
    return f"sqlite+aiosqlite:///{sqlite_path}"


def create_engine(database_url: str) -> AsyncEngine:
    """Create an async engine. SQLite requires check_same_thread=False for async."""
    return create_async_engine(
        database_url,
        echo=False,  # Set to True for SQL debugging
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Recommended for SQLite
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(database_url: Optional[str] = None) -> async_sessionmaker[AsyncSession]:
    """
    Initialize the database - create all tables.
    Called on application startup.
    """
    global _engine, _session_factory

    if _session_factory is not None:
        return _session_factory

    database_url = database_url or default_database_url()
    engine = create_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        await engine.dispose()
        raise

    _engine = engine
    _session_factory = create_session_factory(engine)
    logger.info(f"Database initialized at: {database_url}")
    return _session_factory


async def close_db() -> None:
    """
    Close database connections.
    Called on application shutdown.
    """
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Database connections closed")


def get_session_factory() -> Optional[async_sessionmaker[AsyncSession]]:
    """Session factory, or None if init_db() has not run."""
    return _session_factory
