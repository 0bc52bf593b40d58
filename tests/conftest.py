from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from rosterhub.api.main import create_app
from rosterhub.core.config import get_settings
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.infrastructure.db.base import Base
from rosterhub.infrastructure.db.session import Database


async def _build_database(url: str) -> Database:
    # The Database registers its sqlite pragmas before the first connection is made
    database = Database(get_settings(), engine=create_async_engine(url, future=True))
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return database


@pytest.fixture()
async def database() -> AsyncIterator[Database]:
    database = await _build_database("sqlite+aiosqlite:///:memory:")
    yield database
    await database.dispose()


@pytest.fixture()
async def file_database(tmp_path: Path) -> AsyncIterator[Database]:
    """File-backed database so concurrent sessions use separate connections."""
    database = await _build_database(f"sqlite+aiosqlite:///{tmp_path / 'roster.db'}")
    yield database
    await database.dispose()


@pytest.fixture()
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    async with database.session_factory() as session:
        yield session


@pytest.fixture()
def guard() -> AuthorizationGuard:
    return AuthorizationGuard(get_settings())


@pytest.fixture()
def app(database: Database) -> FastAPI:
    return create_app(database=database)


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to an app that shares the test database."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
