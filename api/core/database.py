"""Database engine, session factory, and lifecycle helpers.

The engine and session maker are created by the application lifespan and
handed to repositories explicitly; nothing here is a module-level singleton.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    # SQLite does not enforce foreign keys unless explicitly enabled.
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine(settings: Settings | None = None) -> AsyncEngine:
    settings = settings or get_settings()

    engine_kwargs: dict = {"echo": settings.db_echo}

    if settings.is_sqlite:
        # SQLite serializes writers; wait on the file lock instead of failing.
        engine_kwargs["poolclass"] = NullPool
        engine_kwargs["connect_args"] = {"timeout": 30}
    else:
        engine_kwargs.update(
            {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_pool_max_overflow,
                "pool_timeout": settings.db_pool_timeout,
                "pool_recycle": settings.db_pool_recycle,
                "pool_pre_ping": True,
            }
        )

    engine = create_async_engine(settings.database_url, **engine_kwargs)

    if settings.is_sqlite:
        _enable_sqlite_foreign_keys(engine)

    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Verify database is reachable."""
    logger.info("db.connectivity.verifying")

    await check_db_connection(engine)
    logger.info("db.connectivity.verified")


async def create_tables(engine: AsyncEngine) -> None:
    """Create missing tables from the ORM models.

    create_all() only creates missing tables - it won't modify existing ones.
    """
    # Import models to ensure they're registered with Base.metadata
    import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db.tables.created")


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("db.engine.disposed")


async def check_db_connection(engine: AsyncEngine) -> None:
    """Verify database is reachable (30s timeout)."""
    async with asyncio.timeout(30):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.rollback()
