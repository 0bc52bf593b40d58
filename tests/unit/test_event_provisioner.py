from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import event as sa_event
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.domain import RoleSpec
from rosterhub.domain.errors import NotFoundError, TransactionFailure, ValidationError
from rosterhub.domain.services.events import EventProvisioner
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.domain.services.roster import RosterLedger
from rosterhub.infrastructure.db.models import EventModel, RoleModel
from tests.utils import NOW, FrozenClock, add_organization, add_volunteer


async def _count(session: AsyncSession, model: type) -> int:
    return await session.scalar(select(func.count()).select_from(model))


async def test_create_event_writes_event_and_roles(session: AsyncSession) -> None:
    org = await add_organization(session)
    provisioner = EventProvisioner(session)

    event = await provisioner.create_event(
        organizer_id=org.id,
        title="Saturday pantry",
        description="Sort and hand out groceries",
        date=NOW + timedelta(days=2),
        location="Community hall",
        roles=[
            RoleSpec(name="Setup", description="Tables and signage", required_volunteers=2),
            RoleSpec(name="Distribution", required_volunteers=6),
        ],
    )

    assert event.id
    assert event.title == "Saturday pantry"
    assert event.organizer_name == "Harbor Food Bank"
    assert event.date == NOW + timedelta(days=2)
    assert [role.name for role in event.roles] == ["Setup", "Distribution"]
    assert all(role.claimed_count == 0 for role in event.roles)
    assert await _count(session, EventModel) == 1
    assert await _count(session, RoleModel) == 2


@pytest.mark.parametrize(
    "roles",
    [
        [],
        [RoleSpec(name="Setup", required_volunteers=2), RoleSpec(name="Bad", required_volunteers=-1)],
        [RoleSpec(name="  ", required_volunteers=1)],
    ],
)
async def test_invalid_roles_leave_no_rows(session: AsyncSession, roles: list[RoleSpec]) -> None:
    org = await add_organization(session)

    with pytest.raises(ValidationError):
        await EventProvisioner(session).create_event(
            organizer_id=org.id,
            title="Broken",
            description=None,
            date=NOW,
            location=None,
            roles=roles,
        )

    assert await _count(session, EventModel) == 0
    assert await _count(session, RoleModel) == 0


async def test_role_storage_failure_rolls_back_whole_event(session: AsyncSession) -> None:
    org = await add_organization(session)

    def fail_on_teardown(mapper, connection, target) -> None:  # type: ignore[no-untyped-def]
        if target.name == "Teardown":
            raise IntegrityError("INSERT INTO roles", {}, Exception("simulated failure"))

    sa_event.listen(RoleModel, "before_insert", fail_on_teardown)
    try:
        with pytest.raises(TransactionFailure):
            await EventProvisioner(session).create_event(
                organizer_id=org.id,
                title="Gala",
                description=None,
                date=NOW + timedelta(days=10),
                location="Ballroom",
                roles=[
                    RoleSpec(name="Setup", required_volunteers=3),
                    RoleSpec(name="Teardown", required_volunteers=3),
                ],
            )
    finally:
        sa_event.remove(RoleModel, "before_insert", fail_on_teardown)

    assert await _count(session, EventModel) == 0
    assert await _count(session, RoleModel) == 0


async def test_create_event_for_unknown_organizer(session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await EventProvisioner(session).create_event(
            organizer_id="nobody",
            title="Ghost",
            description=None,
            date=NOW,
            location=None,
            roles=[RoleSpec(name="Setup")],
        )
    assert await _count(session, EventModel) == 0


async def test_upcoming_events_sorted_with_role_counts(session: AsyncSession) -> None:
    first_org = await add_organization(session, "Harbor Food Bank")
    second_org = await add_organization(session, "Park Friends")
    clock = FrozenClock()
    provisioner = EventProvisioner(session, clock=clock)

    later = await provisioner.create_event(
        organizer_id=first_org.id,
        title="Later",
        description=None,
        date=NOW + timedelta(days=7),
        location=None,
        roles=[RoleSpec(name="A"), RoleSpec(name="B"), RoleSpec(name="C")],
    )
    sooner = await provisioner.create_event(
        organizer_id=second_org.id,
        title="Sooner",
        description=None,
        date=NOW + timedelta(hours=1),
        location=None,
        roles=[RoleSpec(name="A")],
    )
    await provisioner.create_event(
        organizer_id=first_org.id,
        title="Yesterday",
        description=None,
        date=NOW - timedelta(days=1),
        location=None,
        roles=[RoleSpec(name="A")],
    )

    events = await provisioner.list_upcoming_events()

    assert [event.id for event in events] == [sooner.id, later.id]
    assert [event.role_count for event in events] == [1, 3]
    assert [event.organizer_name for event in events] == ["Park Friends", "Harbor Food Bank"]


async def test_event_dated_exactly_now_is_not_upcoming(session: AsyncSession) -> None:
    org = await add_organization(session)
    provisioner = EventProvisioner(session, clock=FrozenClock(NOW))
    await provisioner.create_event(
        organizer_id=org.id,
        title="Right now",
        description=None,
        date=NOW,
        location=None,
        roles=[RoleSpec(name="Setup")],
    )

    assert await provisioner.list_upcoming_events() == []


async def test_get_event_reports_claimed_against_required(
    session: AsyncSession, guard: AuthorizationGuard
) -> None:
    org = await add_organization(session)
    first = await add_volunteer(session, "Ada Lovelace")
    second = await add_volunteer(session, "Grace Hopper")
    provisioner = EventProvisioner(session)
    created = await provisioner.create_event(
        organizer_id=org.id,
        title="Pantry",
        description=None,
        date=NOW + timedelta(days=1),
        location=None,
        roles=[RoleSpec(name="Setup", required_volunteers=2), RoleSpec(name="Drivers")],
    )
    ledger = RosterLedger(session, guard)
    await ledger.signup(volunteer_id=first.id, role_id=created.roles[0].id)
    await ledger.signup(volunteer_id=second.id, role_id=created.roles[0].id)

    event = await provisioner.get_event(created.id)

    assert event.organizer_name == "Harbor Food Bank"
    assert event.role_count == 2
    setup, drivers = event.roles
    assert (setup.name, setup.claimed_count, setup.required_volunteers) == ("Setup", 2, 2)
    assert (drivers.name, drivers.claimed_count, drivers.required_volunteers) == ("Drivers", 0, 1)


async def test_get_unknown_event(session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await EventProvisioner(session).get_event("does-not-exist")
