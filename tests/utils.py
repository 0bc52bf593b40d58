from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.core.auth import AccountKind, create_access_token
from rosterhub.domain import Identity
from rosterhub.infrastructure.db.models import OrganizationModel, VolunteerModel

NOW = datetime.fromisoformat("2026-10-18T12:00:00+00:00")


class FrozenClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


def auth_headers(account_id: str, kind: AccountKind) -> dict[str, str]:
    token = create_access_token(account_id, kind=kind, email=f"{account_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


def identity(account_id: str, kind: AccountKind) -> Identity:
    return Identity(account_id=account_id, kind=kind)


async def add_organization(
    session: AsyncSession, name: str = "Harbor Food Bank", email: str | None = None
) -> OrganizationModel:
    org = OrganizationModel(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.org",
        password_hash="not-a-real-hash",
        description=f"{name} volunteers",
    )
    session.add(org)
    await session.commit()
    return org


async def add_volunteer(
    session: AsyncSession, name: str = "Ada Lovelace", email: str | None = None
) -> VolunteerModel:
    volunteer = VolunteerModel(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        password_hash="not-a-real-hash",
        interests=["food"],
    )
    session.add(volunteer)
    await session.commit()
    return volunteer
