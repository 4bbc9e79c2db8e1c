"""Database session configuration"""

import logging
from typing import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import QueuePool

from labflow.config import (
    DATABASE_URL,
    DB_POOL_SIZE,
    DB_MAX_OVERFLOW,
    DB_POOL_TIMEOUT,
    DB_POOL_RECYCLE,
    DB_ECHO,
)
from labflow.db.base import Base
from labflow.db.functions import register_sqlite_functions

logger = logging.getLogger(__name__)


def to_async_database_url(url: str) -> str:
    """
    Convert a database URL to the async driver format used by the engine.

    Handles:
        postgresql://...          -> postgresql+psycopg://...
        postgresql+asyncpg://...  -> postgresql+psycopg://... (legacy)
        sqlite://...              -> sqlite+aiosqlite://...

    Raises:
        ValueError: If the URL scheme is not supported
    """
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql+psycopg://") or url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("postgresql+asyncpg://"):
        return url.replace("postgresql+asyncpg://", "postgresql+psycopg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    raise ValueError(f"Unsupported database URL format: {url}")


def _log_invalidated(dbapi_conn, connection_record, exception):
    logger.warning(f"Database connection invalidated: {exception}", exc_info=exception)


def build_engine(url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    SQLite engines get the default aiosqlite pool and the helper SQL functions
    from labflow.db.functions; server databases get a sized QueuePool.
    """
    async_url = to_async_database_url(url)
    if async_url.startswith("sqlite+aiosqlite://"):
        new_engine = create_async_engine(async_url, echo=DB_ECHO)
        event.listen(new_engine.sync_engine, "connect", register_sqlite_functions)
    else:
        new_engine = create_async_engine(
            async_url,
            pool_pre_ping=True,  # Verify connections before using them
            pool_size=DB_POOL_SIZE,
            max_overflow=DB_MAX_OVERFLOW,
            pool_timeout=DB_POOL_TIMEOUT,
            pool_recycle=DB_POOL_RECYCLE,
            echo=DB_ECHO,
        )
    # Async engines expose pool events on sync_engine
    event.listen(new_engine.sync_engine, "invalidate", _log_invalidated)
    return new_engine


engine = build_engine(DATABASE_URL)

# Create async session factory
SessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request"""
    async with SessionLocal() as session:
        yield session


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    # Import models so they are registered on Base.metadata
    from labflow.db import models  # noqa: F401

    target = target or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables are ready")


def get_pool_stats(target: AsyncEngine | None = None) -> dict:
    """
    Describe the connection pool behind an engine.

    Always reports the dialect and pool class. Only server databases get a
    QueuePool sized from DB_POOL_SIZE and DB_MAX_OVERFLOW; SQLite keeps the
    driver default, so it is reported with "pooled" False and without the size
    and usage fields.
    """
    target = target or engine
    pool = target.sync_engine.pool
    stats = {
        "dialect": target.dialect.name,
        "pool_class": type(pool).__name__,
        "pooled": target.dialect.name != "sqlite" and isinstance(pool, QueuePool),
    }
    if not stats["pooled"]:
        return stats

    # overflow() is negative while the pool has not been filled yet
    max_overflow = max(0, pool._max_overflow)
    capacity = pool.size() + max_overflow
    checked_out = pool.checkedout()
    stats.update(
        size=pool.size(),
        max_overflow=max_overflow,
        checked_in=pool.checkedin(),
        checked_out=checked_out,
        overflow=max(0, pool.overflow()),
        utilization_percent=round(checked_out / capacity * 100, 2) if capacity > 0 else 0.0,
    )
    return stats


def log_pool_stats(context: str = ""):
    """Log the pool description; warns when a sized pool is above 80% used."""
    stats = get_pool_stats()
    context_str = f" [{context}]" if context else ""

    if not stats["pooled"]:
        logger.info(
            f"Database engine{context_str}: dialect={stats['dialect']}, "
            f"pool={stats['pool_class']} (not size-limited)"
        )
        return

    logger.info(
        f"Connection pool stats{context_str}: "
        f"available={stats['checked_in']}, in_use={stats['checked_out']}, "
        f"overflow={stats['overflow']}, utilization={stats['utilization_percent']:.1f}%"
    )
    if stats["utilization_percent"] > 80:
        logger.warning(f"Connection pool utilization is high ({stats['utilization_percent']:.1f}%)")
