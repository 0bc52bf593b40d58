"""Account registration and login for organizations and volunteers."""

from __future__ import annotations

from typing import Any

import structlog
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.core.auth import AccountKind, create_access_token
from rosterhub.core.config import Settings
from rosterhub.domain.errors import AuthenticationError, ConflictError, NotFoundError
from rosterhub.domain.models import (
    Account,
    OrganizationAccount,
    VolunteerAccount,
    to_public,
)
from rosterhub.infrastructure.db.models import OrganizationModel, VolunteerModel
from rosterhub.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

AccountModel = OrganizationModel | VolunteerModel

_MODELS: dict[AccountKind, type[OrganizationModel] | type[VolunteerModel]] = {
    AccountKind.ORGANIZATION: OrganizationModel,
    AccountKind.VOLUNTEER: VolunteerModel,
}


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def to_account(model: AccountModel) -> Account:
    """Convert a stored account row into its domain variant, dropping the hash."""
    if isinstance(model, OrganizationModel):
        return OrganizationAccount(
            account_id=model.id,
            name=model.name,
            email=model.email,
            description=model.description,
            created_at=model.created_at,
        )
    return VolunteerAccount(
        account_id=model.id,
        name=model.name,
        email=model.email,
        interests=list(model.interests or []),
        created_at=model.created_at,
    )


class IdentityProvider:
    """Issues bearer tokens for organizations and volunteers."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self.session = session
        self.settings = settings

    async def register(
        self,
        *,
        kind: AccountKind,
        name: str,
        email: str,
        password: str,
        description: str | None = None,
        interests: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Register a new account of the given kind.

        Returns:
            dict with the public account and an access token
        """
        await logger.ainfo("register_attempt", email=email, kind=kind.value)

        fields: dict[str, Any] = {
            "name": name,
            "email": email.lower(),
            "password_hash": hash_password(password),
        }
        if kind is AccountKind.ORGANIZATION:
            fields["description"] = description
        else:
            fields["interests"] = list(interests or [])
        model = _MODELS[kind](**fields)

        async with UnitOfWork(self.session, name="register") as uow:
            self.session.add(model)
            try:
                await uow.flush()
            except IntegrityError as exc:
                await logger.awarning("register_duplicate_email", email=email, kind=kind.value)
                raise ConflictError(f"An account with email {email} already exists") from exc
        await self.session.refresh(model)

        account = to_account(model)
        await logger.ainfo("register_success", account_id=account.account_id, kind=kind.value)
        return {"account": to_public(account), "token": self._token(account)}

    async def login(self, *, kind: AccountKind, email: str, password: str) -> dict[str, Any]:
        await logger.ainfo("login_attempt", email=email, kind=kind.value)

        model_cls = _MODELS[kind]
        stmt = select(model_cls).where(model_cls.email == email.lower())
        model = (await self.session.execute(stmt)).scalar_one_or_none()

        if model is None or not verify_password(password, model.password_hash):
            await logger.awarning("login_rejected", email=email, kind=kind.value)
            raise AuthenticationError("Invalid email or password")

        account = to_account(model)
        await logger.ainfo("login_success", account_id=account.account_id, kind=kind.value)
        return {"account": to_public(account), "token": self._token(account)}

    async def get_account(self, *, kind: AccountKind, account_id: str) -> dict[str, Any]:
        model = await self.session.get(_MODELS[kind], account_id)
        if model is None:
            raise NotFoundError(f"Account {account_id} not found")
        return to_public(to_account(model))

    def _token(self, account: Account) -> dict[str, Any]:
        access_token = create_access_token(
            account.account_id,
            kind=account.kind,
            email=account.email,
            settings=self.settings,
        )
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": self.settings.access_token_ttl_seconds,
        }
