from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import event as sa_event
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.core.auth import AccountKind
from rosterhub.domain import EventView, RoleSpec
from rosterhub.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    TransactionFailure,
)
from rosterhub.domain.services.events import EventProvisioner
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.domain.services.roster import RosterLedger
from rosterhub.infrastructure.db.models import AssignmentModel
from rosterhub.infrastructure.db.session import Database
from tests.utils import NOW, add_organization, add_volunteer, identity


async def _create_event(session: AsyncSession, organizer_id: str, *roles: RoleSpec) -> EventView:
    return await EventProvisioner(session).create_event(
        organizer_id=organizer_id,
        title="Beach cleanup",
        description=None,
        date=NOW + timedelta(days=5),
        location="North beach",
        roles=list(roles) or [RoleSpec(name="Setup", required_volunteers=2)],
    )


async def test_signup_creates_unattended_assignment(
    session: AsyncSession, guard: AuthorizationGuard
) -> None:
    org = await add_organization(session)
    volunteer = await add_volunteer(session)
    event = await _create_event(session, org.id)

    assignment = await RosterLedger(session, guard).signup(
        volunteer_id=volunteer.id, role_id=event.roles[0].id
    )

    assert assignment.id
    assert assignment.volunteer_id == volunteer.id
    assert assignment.role_id == event.roles[0].id
    assert assignment.attended is False


async def test_second_signup_for_same_role_conflicts(
    session: AsyncSession, guard: AuthorizationGuard
) -> None:
    org = await add_organization(session)
    volunteer = await add_volunteer(session)
    event = await _create_event(session, org.id)
    ledger = RosterLedger(session, guard)
    await ledger.signup(volunteer_id=volunteer.id, role_id=event.roles[0].id)

    with pytest.raises(ConflictError, match="Already signed up"):
        await ledger.signup(volunteer_id=volunteer.id, role_id=event.roles[0].id)

    count = await session.scalar(select(func.count()).select_from(AssignmentModel))
    assert count == 1


async def test_signup_foreign_key_failure_is_not_a_conflict(
    session: AsyncSession, guard: AuthorizationGuard
) -> None:
    org = await add_organization(session)
    volunteer = await add_volunteer(session)
    event = await _create_event(session, org.id)
    volunteer_id, role_id = volunteer.id, event.roles[0].id

    def role_vanished(mapper, connection, target) -> None:  # type: ignore[no-untyped-def]
        raise IntegrityError("INSERT INTO assignments", {}, Exception("FOREIGN KEY constraint failed"))

    sa_event.listen(AssignmentModel, "before_insert", role_vanished)
    try:
        with pytest.raises(TransactionFailure):
            await RosterLedger(session, guard).signup(volunteer_id=volunteer_id, role_id=role_id)
    finally:
        sa_event.remove(AssignmentModel, "before_insert", role_vanished)

    count = await session.scalar(select(func.count()).select_from(AssignmentModel))
    assert count == 0


async def test_signup_for_unknown_role(session: AsyncSession, guard: AuthorizationGuard) -> None:
    volunteer = await add_volunteer(session)

    with pytest.raises(NotFoundError):
        await RosterLedger(session, guard).signup(volunteer_id=volunteer.id, role_id="no-such-role")


async def test_signup_is_not_capped_by_required_volunteers(
    session: AsyncSession, guard: AuthorizationGuard
) -> None:
    org = await add_organization(session)
    event = await _create_event(session, org.id, RoleSpec(name="Greeter", required_volunteers=1))
    ledger = RosterLedger(session, guard)

    for name in ("Ada Lovelace", "Grace Hopper"):
        volunteer = await add_volunteer(session, name)
        await ledger.signup(volunteer_id=volunteer.id, role_id=event.roles[0].id)

    detail = await EventProvisioner(session).get_event(event.id)
    assert detail.roles[0].claimed_count == 2


@pytest.mark.parametrize("attempts", [2, 8])
async def test_concurrent_signups_record_exactly_one_claim(
    file_database: Database, guard: AuthorizationGuard, attempts: int
) -> None:
    async with file_database.session_factory() as setup:
        org = await add_organization(setup)
        volunteer = await add_volunteer(setup)
        event = await _create_event(setup, org.id)
    role_id = event.roles[0].id

    async def attempt() -> str:
        async with file_database.session_factory() as session:
            try:
                await RosterLedger(session, guard).signup(volunteer_id=volunteer.id, role_id=role_id)
            except ConflictError:
                return "conflict"
            return "created"

    outcomes = await asyncio.gather(*(attempt() for _ in range(attempts)))

    assert outcomes.count("created") == 1
    assert outcomes.count("conflict") == attempts - 1
    async with file_database.session_factory() as check:
        count = await check.scalar(
            select(func.count())
            .select_from(AssignmentModel)
            .where(AssignmentModel.volunteer_id == volunteer.id, AssignmentModel.role_id == role_id)
        )
    assert count == 1


async def test_roster_sorted_by_role_then_volunteer(
    session: AsyncSession, guard: AuthorizationGuard
) -> None:
    org = await add_organization(session)
    event = await _create_event(
        session, org.id, RoleSpec(name="Setup"), RoleSpec(name="Cooking")
    )
    setup_role, cooking_role = event.roles
    zed = await add_volunteer(session, "Zed Shaw")
    amy = await add_volunteer(session, "Amy Pond")
    ledger = RosterLedger(session, guard)
    await ledger.signup(volunteer_id=zed.id, role_id=setup_role.id)
    await ledger.signup(volunteer_id=amy.id, role_id=setup_role.id)
    await ledger.signup(volunteer_id=zed.id, role_id=cooking_role.id)

    roster = await ledger.list_assignments_for_event(
        event_id=event.id, caller=identity(org.id, AccountKind.ORGANIZATION)
    )

    assert [(entry.role_name, entry.volunteer_name) for entry in roster] == [
        ("Cooking", "Zed Shaw"),
        ("Setup", "Amy Pond"),
        ("Setup", "Zed Shaw"),
    ]
    assert roster[1].volunteer_email == "amy.pond@example.com"
    assert all(entry.attended is False for entry in roster)


async def test_roster_hidden_from_other_accounts(
    session: AsyncSession, guard: AuthorizationGuard
) -> None:
    owner = await add_organization(session, "Owner Org")
    other = await add_organization(session, "Other Org")
    volunteer = await add_volunteer(session)
    event = await _create_event(session, owner.id)
    ledger = RosterLedger(session, guard)

    with pytest.raises(AuthorizationError):
        await ledger.list_assignments_for_event(
            event_id=event.id, caller=identity(other.id, AccountKind.ORGANIZATION)
        )
    with pytest.raises(AuthorizationError):
        await ledger.list_assignments_for_event(
            event_id=event.id, caller=identity(volunteer.id, AccountKind.VOLUNTEER)
        )
    with pytest.raises(NotFoundError):
        await ledger.list_assignments_for_event(
            event_id="missing", caller=identity(owner.id, AccountKind.ORGANIZATION)
        )
