"""
Engine, sessions and schema setup for the PostgreSQL data store.

The engine and session factory are created on first use so importing the
package never needs DB_URL; API handlers get a per-request session from
``get_db`` and background readers open their own with ``session_scope``.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from carecoord.db.config import get_db_settings
from carecoord.utils.logger import logger

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base shared by the inventory, schedule and chat models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the process-wide async engine, creating it from DB_* settings."""
    global _engine
    if _engine is None:
        settings = get_db_settings()
        _engine = create_async_engine(
            settings.get_async_url(),
            echo=settings.echo,
            pool_pre_ping=True,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        # Rows are handed to pydantic after commit, so keep them loaded.
        _session_factory = async_sessionmaker(
            get_engine(), expire_on_commit=False, autoflush=False
        )
    return _session_factory


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    Open a session that commits on success and rolls back on error.

    Example:
        ```python
        async with session_scope() as session:
            items = await InventoryRepository(session).list_items()
        ```
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding the request's session.

    Every repository resolved in one request shares this session.
    """
    async with session_scope() as session:
        yield session


async def init_db() -> None:
    """
    Create missing tables and (re)install the change-notification triggers.

    Meant for local setup; a managed database keeps its own schema.
    """
    from carecoord.db.changes.listener import install_change_triggers

    logger.info("Creating tables and change triggers")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await install_change_triggers(conn)
    logger.info("Schema ready", tables=sorted(Base.metadata.tables))


async def close_db() -> None:
    """Dispose of the engine, if one was ever created, on shutdown."""
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database engine disposed")
