from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import datetime
from typing import NoReturn

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.core.auth import AccountKind
from rosterhub.core.config import Settings, get_settings
from rosterhub.domain import Identity
from rosterhub.domain.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RosterError,
    ValidationError,
)
from rosterhub.domain.models import utcnow
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.infrastructure.db.session import Database

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


def get_database(request: Request) -> Database:
    """Return the database attached to the application at startup."""
    return request.app.state.database


async def get_db_session(
    database: Database = Depends(get_database),  # noqa: B008
) -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in database.session():
        yield session


def get_clock() -> Callable[[], datetime]:
    """Source of "now" used to split upcoming from past events."""
    return utcnow


def get_guard(settings: Settings = Depends(get_settings)) -> AuthorizationGuard:  # noqa: B008
    return AuthorizationGuard(settings)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    guard: AuthorizationGuard = Depends(get_guard),  # noqa: B008
) -> Identity:
    """Resolve the caller from a bearer token."""
    token = credentials.credentials if credentials else None
    try:
        return guard.resolve(token)
    except RosterError as exc:
        raise_http_error(exc)


def require_kind(kind: AccountKind) -> Callable[..., Identity]:
    """Dependency factory enforcing that the caller holds an account of ``kind``."""

    def dependency(
        identity: Identity = Depends(get_current_identity),  # noqa: B008
        guard: AuthorizationGuard = Depends(get_guard),  # noqa: B008
    ) -> Identity:
        try:
            return guard.require_kind(identity, kind)
        except RosterError as exc:
            raise_http_error(exc)

    return dependency


def raise_http_error(
    exc: RosterError, *, conflict_status: int = status.HTTP_409_CONFLICT
) -> NoReturn:
    """Translate a domain error into the matching HTTP response.

    Storage faults are logged with their cause and reported with a generic detail.
    """
    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if isinstance(exc, AuthenticationError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    if isinstance(exc, AuthorizationError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, ConflictError):
        raise HTTPException(status_code=conflict_status, detail=str(exc)) from exc

    logger.error(
        "request_failed",
        error_type=type(exc).__name__,
        error=str(exc),
        cause=repr(exc.__cause__) if exc.__cause__ else None,
    )
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    ) from exc
