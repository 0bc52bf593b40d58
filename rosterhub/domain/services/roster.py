from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.domain.errors import ConflictError, NotFoundError, PersistenceError
from rosterhub.domain.models import AssignmentView, Identity, RosterEntry
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.infrastructure.db.models import (
    AssignmentModel,
    RoleModel,
    VolunteerModel,
)
from rosterhub.infrastructure.repositories.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from sqlalchemy import Select

logger = structlog.get_logger()

# PostgreSQL reports the constraint name, SQLite only the column list
_DUPLICATE_CLAIM_MARKERS = (
    "uq_assignment_volunteer_role",
    "assignments.volunteer_id, assignments.role_id",
)


def _is_duplicate_claim(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _DUPLICATE_CLAIM_MARKERS)


class RosterLedger:
    """Volunteer claims on event roles.

    A (volunteer, role) pair is unique at the storage level; the insert itself
    is the check, so concurrent signups for the same pair cannot both succeed.
    Signups are not capped at the role's ``required_volunteers``.
    """

    def __init__(self, session: AsyncSession, guard: AuthorizationGuard) -> None:
        self.session = session
        self.guard = guard

    async def signup(self, *, volunteer_id: str, role_id: str) -> AssignmentView:
        async with UnitOfWork(self.session, name="signup") as uow:
            role = await self.session.get(RoleModel, role_id)
            if role is None:
                raise NotFoundError(f"Role {role_id} not found")
            volunteer = await self.session.get(VolunteerModel, volunteer_id)
            if volunteer is None:
                raise NotFoundError(f"Volunteer {volunteer_id} not found")

            assignment = AssignmentModel(volunteer_id=volunteer_id, role_id=role_id, attended=False)
            self.session.add(assignment)
            try:
                await uow.flush()
            except IntegrityError as exc:
                if not _is_duplicate_claim(exc):
                    raise
                await logger.ainfo("signup_conflict", volunteer_id=volunteer_id, role_id=role_id)
                raise ConflictError("Already signed up for this role") from exc

            view = AssignmentView(
                id=assignment.id,
                volunteer_id=volunteer_id,
                role_id=role_id,
                attended=assignment.attended,
            )

        await logger.ainfo(
            "signup_recorded",
            assignment_id=view.id,
            volunteer_id=volunteer_id,
            role_id=role_id,
        )
        return view

    async def list_assignments_for_event(
        self, *, event_id: str, caller: Identity
    ) -> list[RosterEntry]:
        """Roster of an event, visible only to the organization that owns it."""
        await self.guard.ensure_event_owner(self.session, event_id, caller)

        stmt: Select[tuple[AssignmentModel, RoleModel, VolunteerModel]] = (
            select(AssignmentModel, RoleModel, VolunteerModel)
            .join(RoleModel, RoleModel.id == AssignmentModel.role_id)
            .join(VolunteerModel, VolunteerModel.id == AssignmentModel.volunteer_id)
            .where(RoleModel.event_id == event_id)
            .order_by(RoleModel.name, VolunteerModel.name, AssignmentModel.id)
        )
        try:
            rows = (await self.session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            logger.error("roster_query_failed", event_id=event_id, error=str(exc))
            raise PersistenceError("Could not load the event roster") from exc

        return [
            RosterEntry(
                assignment_id=assignment.id,
                volunteer_id=volunteer.id,
                volunteer_name=volunteer.name,
                volunteer_email=volunteer.email,
                role_id=role.id,
                role_name=role.name,
                attended=assignment.attended,
            )
            for assignment, role, volunteer in rows
        ]
