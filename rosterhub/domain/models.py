from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from rosterhub.core.auth import AccountKind

# Hours credited for every attended past event.
HOURS_PER_ATTENDED_EVENT = 3


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive values are treated as UTC; SQLite hands timestamps back without tzinfo.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(slots=True, frozen=True)
class Identity:
    """Authenticated caller resolved from a bearer credential."""

    account_id: str
    kind: AccountKind
    email: str = ""


@dataclass(slots=True)
class OrganizationAccount:
    account_id: str
    name: str
    email: str
    description: str | None = None
    created_at: datetime | None = None
    kind: AccountKind = field(default=AccountKind.ORGANIZATION, init=False)


@dataclass(slots=True)
class VolunteerAccount:
    account_id: str
    name: str
    email: str
    interests: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    kind: AccountKind = field(default=AccountKind.VOLUNTEER, init=False)


Account = OrganizationAccount | VolunteerAccount


def to_public(account: Account) -> dict[str, Any]:
    """Project an account into its outward representation.

    Only the fields listed here ever leave the service; credential hashes are
    never part of an ``Account`` in the first place.
    """
    payload: dict[str, Any] = {
        "id": account.account_id,
        "kind": account.kind.value,
        "name": account.name,
        "email": account.email,
        "created_at": account.created_at,
    }
    match account:
        case OrganizationAccount(description=description):
            payload["description"] = description
        case VolunteerAccount(interests=interests):
            payload["interests"] = list(interests)
    return payload


@dataclass(slots=True)
class RoleSpec:
    """Requested role for a new event."""

    name: str
    description: str | None = None
    required_volunteers: int = 1


@dataclass(slots=True)
class RoleView:
    id: str
    event_id: str
    name: str
    description: str | None
    required_volunteers: int
    claimed_count: int = 0


@dataclass(slots=True)
class EventView:
    id: str
    organizer_id: str
    organizer_name: str | None
    title: str
    description: str | None
    date: datetime
    location: str | None
    role_count: int = 0
    roles: list[RoleView] = field(default_factory=list)


@dataclass(slots=True)
class AssignmentView:
    id: str
    volunteer_id: str
    role_id: str
    attended: bool


@dataclass(slots=True)
class RosterEntry:
    assignment_id: str
    volunteer_id: str
    volunteer_name: str
    volunteer_email: str
    role_id: str
    role_name: str
    attended: bool


@dataclass(slots=True)
class ProfileEntry:
    assignment_id: str
    event_id: str
    title: str
    date: datetime
    location: str | None
    organizer_name: str | None
    role_name: str
    attended: bool


@dataclass(slots=True)
class VolunteerStats:
    total_events: int = 0
    total_hours: int = 0


@dataclass(slots=True)
class VolunteerProfile:
    upcoming: list[ProfileEntry] = field(default_factory=list)
    past: list[ProfileEntry] = field(default_factory=list)
    stats: VolunteerStats = field(default_factory=VolunteerStats)
