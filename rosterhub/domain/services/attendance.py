from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.domain.errors import PersistenceError
from rosterhub.domain.models import (
    HOURS_PER_ATTENDED_EVENT,
    AssignmentView,
    Identity,
    ProfileEntry,
    VolunteerProfile,
    VolunteerStats,
    as_utc,
    utcnow,
)
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.infrastructure.db.models import (
    AssignmentModel,
    EventModel,
    OrganizationModel,
    RoleModel,
)
from rosterhub.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()


class AttendanceAggregator:
    """Volunteer-facing history and the organizer's attendance updates."""

    def __init__(
        self,
        session: AsyncSession,
        guard: AuthorizationGuard,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session = session
        self.guard = guard
        self.clock = clock

    async def volunteer_profile(self, volunteer_id: str) -> VolunteerProfile:
        """Split the volunteer's claims into upcoming and past and total the credit.

        An event dated exactly now counts as past.
        """
        now = self.clock()
        stmt = (
            select(
                AssignmentModel.id,
                AssignmentModel.attended,
                RoleModel.name,
                EventModel.id,
                EventModel.title,
                EventModel.date,
                EventModel.location,
                OrganizationModel.name,
            )
            .join(RoleModel, RoleModel.id == AssignmentModel.role_id)
            .join(EventModel, EventModel.id == RoleModel.event_id)
            .join(OrganizationModel, OrganizationModel.id == EventModel.organizer_id)
            .where(AssignmentModel.volunteer_id == volunteer_id)
        )
        try:
            upcoming_rows = (
                await self.session.execute(
                    stmt.where(EventModel.date > now).order_by(EventModel.date.asc())
                )
            ).all()
            past_rows = (
                await self.session.execute(
                    stmt.where(EventModel.date <= now).order_by(EventModel.date.desc())
                )
            ).all()
        except SQLAlchemyError as exc:
            logger.error("profile_query_failed", volunteer_id=volunteer_id, error=str(exc))
            raise PersistenceError("Could not load volunteer profile") from exc

        upcoming = [_profile_entry(row) for row in upcoming_rows]
        past = [_profile_entry(row) for row in past_rows]
        total_events = sum(1 for entry in past if entry.attended)

        return VolunteerProfile(
            upcoming=upcoming,
            past=past,
            stats=VolunteerStats(
                total_events=total_events,
                total_hours=total_events * HOURS_PER_ATTENDED_EVENT,
            ),
        )

    async def set_attendance(
        self, *, record_id: str, attended: bool, caller: Identity
    ) -> AssignmentView:
        """Mark an assignment attended or not. Setting the same value twice is a no-op."""
        async with UnitOfWork(self.session, name="set_attendance"):
            assignment = await self.guard.ensure_assignment_owner(
                self.session, record_id, caller
            )
            changed = assignment.attended != attended
            assignment.attended = attended
            view = AssignmentView(
                id=assignment.id,
                volunteer_id=assignment.volunteer_id,
                role_id=assignment.role_id,
                attended=attended,
            )

        await logger.ainfo(
            "attendance_updated",
            assignment_id=record_id,
            attended=attended,
            changed=changed,
            organizer_id=caller.account_id,
        )
        return view


def _profile_entry(row) -> ProfileEntry:  # type: ignore[no-untyped-def]
    (
        assignment_id,
        attended,
        role_name,
        event_id,
        title,
        date,
        location,
        organizer_name,
    ) = row
    return ProfileEntry(
        assignment_id=assignment_id,
        event_id=event_id,
        title=title,
        date=as_utc(date),
        location=location,
        organizer_name=organizer_name,
        role_name=role_name,
        attended=attended,
    )
