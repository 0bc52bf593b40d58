"""Authentication routes - register, login, profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.api.deps import get_current_identity, get_db_session, raise_http_error
from rosterhub.api.schemas.auth import (
    AccountResponse,
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    TokenResponse,
)
from rosterhub.core.config import Settings, get_settings
from rosterhub.domain import Identity
from rosterhub.domain.errors import RosterError
from rosterhub.domain.services.identity import IdentityProvider

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an organization or volunteer",
)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> AuthResponse:
    service = IdentityProvider(session, settings)

    try:
        result = await service.register(
            kind=payload.kind,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            description=payload.description,
            interests=payload.interests,
        )
    except RosterError as exc:
        raise_http_error(exc)

    return AuthResponse(
        message="Registration successful",
        account=AccountResponse(**result["account"]),
        token=TokenResponse(**result["token"]),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
    description="Authenticate with email and password, returns a JWT access token.",
)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> AuthResponse:
    service = IdentityProvider(session, settings)

    try:
        result = await service.login(
            kind=payload.kind,
            email=payload.email,
            password=payload.password,
        )
    except RosterError as exc:
        raise_http_error(exc)

    return AuthResponse(
        message="Login successful",
        account=AccountResponse(**result["account"]),
        token=TokenResponse(**result["token"]),
    )


@router.get("/me", response_model=MeResponse, summary="Get current account")
async def get_me(
    identity: Identity = Depends(get_current_identity),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> MeResponse:
    service = IdentityProvider(session, settings)

    try:
        account = await service.get_account(kind=identity.kind, account_id=identity.account_id)
    except RosterError as exc:
        raise_http_error(exc)

    return MeResponse(account=AccountResponse(**account))
