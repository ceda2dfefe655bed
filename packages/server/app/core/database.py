"""
Database connection and session management.

Components never reach for a module-level engine: each one receives a
``StorageContext`` at construction, and every write runs inside
``StorageContext.unit_of_work()``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.core.config import Settings

log = structlog.get_logger()


def _use_immediate_transactions(engine: AsyncEngine) -> None:
    """Make every SQLite transaction take the write lock up front.

    pysqlite defers BEGIN until the first write, which lets two connections
    both read and then deadlock on upgrade. BEGIN IMMEDIATE queues writers on
    the database lock instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class StorageContext:
    """Owns the engine and session factory for one database."""

    def __init__(self, database_url: str, *, echo: bool = False, **engine_kwargs):
        self.database_url = database_url
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            echo=echo,
            future=True,
            **engine_kwargs,
        )
        if self.engine.dialect.name == "sqlite":
            _use_immediate_transactions(self.engine)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageContext":
        return cls(settings.database_url, echo=settings.database_echo)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    async def create_all(self) -> None:
        """Create all tables (development and tests only; production uses migrations)."""
        # Registers every table on SQLModel.metadata.
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[AsyncSession]:
        """One transaction: commits on clean exit, rolls back on any exception."""
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[AsyncSession]:
        """A session for lookups; nothing is committed."""
        async with self.session_factory() as session:
            yield session
