from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.domain.errors import NotFoundError, PersistenceError, ValidationError
from rosterhub.domain.models import EventView, RoleSpec, RoleView, as_utc, utcnow
from rosterhub.infrastructure.db.models import (
    AssignmentModel,
    EventModel,
    OrganizationModel,
    RoleModel,
)
from rosterhub.infrastructure.repositories.unit_of_work import UnitOfWork

if TYPE_CHECKING:
    from sqlalchemy import Select

logger = structlog.get_logger()


class EventProvisioner:
    """Creates events together with their roles and serves event read models."""

    def __init__(self, session: AsyncSession, *, clock: Callable[[], datetime] = utcnow) -> None:
        self.session = session
        self.clock = clock

    async def create_event(
        self,
        *,
        organizer_id: str,
        title: str,
        description: str | None,
        date: datetime,
        location: str | None,
        roles: Sequence[RoleSpec],
    ) -> EventView:
        """Write the event and every role in one transaction.

        Input is validated up front; a storage fault on any row rolls back the
        event as well, so no event is ever visible with a partial role set.
        """
        self._validate_roles(roles)

        async with UnitOfWork(self.session, name="create_event") as uow:
            organizer = await self.session.get(OrganizationModel, organizer_id)
            if organizer is None:
                raise NotFoundError(f"Organization {organizer_id} not found")

            event = EventModel(
                organizer_id=organizer_id,
                title=title,
                description=description,
                date=as_utc(date),
                location=location,
            )
            event.roles = [
                RoleModel(
                    name=spec.name,
                    description=spec.description,
                    required_volunteers=spec.required_volunteers,
                    position=position,
                )
                for position, spec in enumerate(roles)
            ]
            self.session.add(event)
            await uow.flush()

            view = EventView(
                id=event.id,
                organizer_id=organizer_id,
                organizer_name=organizer.name,
                title=event.title,
                description=event.description,
                date=as_utc(event.date),
                location=event.location,
                role_count=len(event.roles),
                roles=[_role_view(role, claimed_count=0) for role in event.roles],
            )

        await logger.ainfo(
            "event_created",
            event_id=view.id,
            organizer_id=organizer_id,
            role_count=view.role_count,
        )
        return view

    async def list_upcoming_events(self) -> list[EventView]:
        """Events dated strictly after now, soonest first, with role counts."""
        now = self.clock()
        role_counts = (
            select(RoleModel.event_id, func.count(RoleModel.id).label("role_count"))
            .group_by(RoleModel.event_id)
            .subquery()
        )
        stmt: Select[tuple[EventModel, str, int | None]] = (
            select(EventModel, OrganizationModel.name, role_counts.c.role_count)
            .join(OrganizationModel, OrganizationModel.id == EventModel.organizer_id)
            .join(role_counts, role_counts.c.event_id == EventModel.id, isouter=True)
            .where(EventModel.date > now)
            .order_by(EventModel.date.asc(), EventModel.id)
        )
        rows = await self._fetch(stmt)
        return [
            _event_view(event, organizer_name=organizer_name, role_count=role_count or 0)
            for event, organizer_name, role_count in rows
        ]

    async def get_event(self, event_id: str) -> EventView:
        stmt: Select[tuple[EventModel, str]] = (
            select(EventModel, OrganizationModel.name)
            .join(OrganizationModel, OrganizationModel.id == EventModel.organizer_id)
            .where(EventModel.id == event_id)
        )
        rows = await self._fetch(stmt)
        if not rows:
            raise NotFoundError(f"Event {event_id} not found")
        event, organizer_name = rows[0]

        role_stmt = (
            select(RoleModel, func.count(AssignmentModel.id))
            .join(AssignmentModel, AssignmentModel.role_id == RoleModel.id, isouter=True)
            .where(RoleModel.event_id == event_id)
            .group_by(RoleModel.id)
            .order_by(RoleModel.position, RoleModel.name)
        )
        role_rows = await self._fetch(role_stmt)
        roles = [_role_view(role, claimed_count=claimed) for role, claimed in role_rows]

        view = _event_view(event, organizer_name=organizer_name, role_count=len(roles))
        view.roles = roles
        return view

    @staticmethod
    def _validate_roles(roles: Sequence[RoleSpec]) -> None:
        if not roles:
            raise ValidationError("An event needs at least one role")
        for index, spec in enumerate(roles):
            if not spec.name or not spec.name.strip():
                raise ValidationError(f"Role #{index + 1} is missing a name")
            if spec.required_volunteers < 0:
                raise ValidationError(
                    f"Role '{spec.name}' cannot require a negative number of volunteers"
                )

    async def _fetch(self, stmt):  # type: ignore[no-untyped-def]
        try:
            return (await self.session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            logger.error("event_query_failed", error=str(exc))
            raise PersistenceError("Could not load events") from exc


def _event_view(event: EventModel, *, organizer_name: str | None, role_count: int) -> EventView:
    return EventView(
        id=event.id,
        organizer_id=event.organizer_id,
        organizer_name=organizer_name,
        title=event.title,
        description=event.description,
        date=as_utc(event.date),
        location=event.location,
        role_count=role_count,
    )


def _role_view(role: RoleModel, *, claimed_count: int) -> RoleView:
    return RoleView(
        id=role.id,
        event_id=role.event_id,
        name=role.name,
        description=role.description,
        required_volunteers=role.required_volunteers,
        claimed_count=claimed_count,
    )
