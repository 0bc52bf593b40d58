from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.api.deps import (
    get_clock,
    get_db_session,
    get_guard,
    raise_http_error,
    require_kind,
)
from rosterhub.api.schemas.events import (
    EventCreate,
    EventDetail,
    EventItem,
    EventsResponse,
    RoleItem,
)
from rosterhub.api.schemas.roster import RosterItem, RosterResponse
from rosterhub.core.auth import AccountKind
from rosterhub.domain import EventView, Identity, RoleSpec
from rosterhub.domain.errors import RosterError
from rosterhub.domain.services.events import EventProvisioner
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.domain.services.roster import RosterLedger

router = APIRouter(prefix="/events", tags=["Events"])

require_organization = require_kind(AccountKind.ORGANIZATION)


@router.post("", response_model=EventDetail, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    organization: Identity = Depends(require_organization),  # noqa: B008
) -> EventDetail:
    """Create an event and all of its roles in one transaction (organizations only)."""
    provisioner = EventProvisioner(session)
    try:
        event = await provisioner.create_event(
            organizer_id=organization.account_id,
            title=payload.title,
            description=payload.description,
            date=payload.date,
            location=payload.location,
            roles=[
                RoleSpec(
                    name=role.name,
                    description=role.description,
                    required_volunteers=role.required_volunteers,
                )
                for role in payload.roles
            ],
        )
    except RosterError as exc:
        raise_http_error(exc)

    return _event_detail(event)


@router.get("", response_model=EventsResponse)
async def list_events(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    clock: Callable[[], datetime] = Depends(get_clock),  # noqa: B008
) -> EventsResponse:
    """Upcoming events, soonest first, with the number of roles each one offers."""
    provisioner = EventProvisioner(session, clock=clock)
    try:
        events = await provisioner.list_upcoming_events()
    except RosterError as exc:
        raise_http_error(exc)

    return EventsResponse(events=[_event_item(event) for event in events])


@router.get("/{event_id}", response_model=EventDetail)
async def get_event(
    event_id: str,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> EventDetail:
    """Event details with claimed vs required headcount per role."""
    provisioner = EventProvisioner(session)
    try:
        event = await provisioner.get_event(event_id)
    except RosterError as exc:
        raise_http_error(exc)

    return _event_detail(event)


@router.get("/{event_id}/volunteers", response_model=RosterResponse)
async def list_event_volunteers(
    event_id: str,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    organization: Identity = Depends(require_organization),  # noqa: B008
    guard: AuthorizationGuard = Depends(get_guard),  # noqa: B008
) -> RosterResponse:
    """Roster of an event for the organization that owns it."""
    ledger = RosterLedger(session, guard)
    try:
        entries = await ledger.list_assignments_for_event(event_id=event_id, caller=organization)
    except RosterError as exc:
        raise_http_error(exc)

    return RosterResponse(
        event_id=event_id,
        volunteers=[RosterItem(**asdict(entry)) for entry in entries],
    )


def _event_item(event: EventView) -> EventItem:
    return EventItem(
        id=event.id,
        organizer_id=event.organizer_id,
        organizer_name=event.organizer_name,
        title=event.title,
        description=event.description,
        date=event.date,
        location=event.location,
        role_count=event.role_count,
    )


def _event_detail(event: EventView) -> EventDetail:
    return EventDetail(
        **_event_item(event).model_dump(),
        roles=[RoleItem(**asdict(role)) for role in event.roles],
    )
