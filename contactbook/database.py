"""
ContactBook Backend: Database Engine and Session Helpers
========================================================

What:  Async SQLAlchemy engine factory, session factory, declarative Base and
       a transactional session scope.
How:   Nothing here is created at import time. DocumentStore.open() calls
       create_engine_from_settings() and owns the resulting engine for the
       lifetime of the application, so every app (and every test) gets its
       own connection pool.

Connection Pooling:
    PostgreSQL:  pool_size + max_overflow persistent/burst connections,
                 pre-ping to catch stale connections, hourly recycle.
    SQLite:      file databases use the driver defaults; in-memory databases
                 use StaticPool so every session sees the same memory DB.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from contactbook.config import Settings


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata is what Alembic tracks."""
    pass


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url)


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Build the async engine for the configured DATABASE_URL.

    Pool arguments are only valid for queue-based pools, so they are passed
    for server databases and left out for SQLite.
    """
    kwargs = {
        "echo": settings.log_level == "DEBUG",
    }
    if settings.is_sqlite:
        if _is_memory_sqlite(settings.database_url):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=3600,
        )
    return create_async_engine(settings.database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: documents are read after commit to build responses
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Provide a session that commits on success and rolls back on error.

    Example:
        async with session_scope(factory) as session:
            session.add(document)
    """
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
