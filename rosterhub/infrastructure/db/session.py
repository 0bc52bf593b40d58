from __future__ import annotations

from collections.abc import AsyncIterator

import structlog
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from rosterhub.core.config import Settings

logger = structlog.get_logger()


class Database:
    """Owns the engine and session factory for one application instance.

    Built from ``Settings`` at startup and disposed at shutdown; nothing here is a
    module-level singleton.
    """

    def __init__(self, settings: Settings, *, engine: AsyncEngine | None = None) -> None:
        self.settings = settings
        self.engine = engine or create_async_engine(
            settings.async_database_url,
            echo=settings.db_echo,
            future=True,
            pool_pre_ping=True,
        )
        if self.engine.dialect.name == "sqlite":
            _enable_sqlite_foreign_keys(self.engine)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            expire_on_commit=False,
        )

    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    async def dispose(self) -> None:
        """Close pooled connections once in-flight sessions have returned them."""
        await self.engine.dispose()
        logger.info("database_disposed", dialect=self.engine.dialect.name)


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, _record) -> None:  # type: ignore[no-untyped-def]
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

