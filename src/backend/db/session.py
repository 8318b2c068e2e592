"""
Async SQLAlchemy engine and session management.

The engine is created lazily from DATABASE_URL and shared across requests.
PostgreSQL (asyncpg) is used in deployment, SQLite (aiosqlite) for local runs.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings
from db.base import Base

logger = logging.getLogger(__name__)

# Global instances (lazy-initialized)
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Get or create the shared async engine."""
    global _engine

    if _engine is None:
        _engine = create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            pool_pre_ping=True,
        )
        logger.info(f"Initialized database engine for {_engine.url.render_as_string(hide_password=True)}")

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory bound to the shared engine."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)

    return _session_factory


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create the ledger tables if they do not exist.

    Safe to run on every startup.
    """
    import models  # noqa: F401  (registers the table models on Base.metadata)

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")


async def close_db() -> None:
    """
    Dispose of the engine and its connection pool.

    Should be called during application shutdown.
    """
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
        logger.info("Closed database engine")
