"""Identity resolution and ownership checks for roster mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.core.auth import AccountKind, TokenError, decode_access_token
from rosterhub.core.config import Settings
from rosterhub.domain.errors import AuthenticationError, AuthorizationError, NotFoundError
from rosterhub.domain.models import Identity
from rosterhub.infrastructure.db.models import AssignmentModel, EventModel, RoleModel

if TYPE_CHECKING:
    from sqlalchemy import Select

logger = structlog.get_logger()


class AuthorizationGuard:
    """Stateless per-request resolver.

    Every request is verified on its own: a credential is decoded into an
    ``Identity`` and then checked against the kind and ownership rules of the
    operation. Nothing is cached between calls.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def resolve(self, credential: str | None) -> Identity:
        if not credential:
            raise AuthenticationError("Missing bearer token")

        try:
            payload = decode_access_token(credential, settings=self.settings)
        except TokenError as exc:
            logger.info("credential_rejected", reason=str(exc))
            raise AuthorizationError(str(exc)) from exc

        account_id = payload.get("sub")
        if not account_id:
            raise AuthorizationError("Token missing subject")

        return Identity(
            account_id=str(account_id),
            kind=AccountKind(payload["kind"]),
            email=payload.get("email", ""),
        )

    def require_kind(self, identity: Identity, kind: AccountKind) -> Identity:
        if identity.kind is not kind:
            logger.info(
                "account_kind_rejected",
                account_id=identity.account_id,
                kind=identity.kind.value,
                required=kind.value,
            )
            raise AuthorizationError(f"Only {kind.value} accounts may perform this action")
        return identity

    async def ensure_event_owner(
        self, session: AsyncSession, event_id: str, identity: Identity
    ) -> EventModel:
        """Return the event if ``identity`` is the organization that owns it."""
        self.require_kind(identity, AccountKind.ORGANIZATION)

        event = await session.get(EventModel, event_id)
        if event is None:
            raise NotFoundError(f"Event {event_id} not found")
        if event.organizer_id != identity.account_id:
            self._ownership_denied(identity, event_id=event_id)
        return event

    async def ensure_assignment_owner(
        self, session: AsyncSession, assignment_id: str, identity: Identity
    ) -> AssignmentModel:
        """Walk Assignment -> Role -> Event and compare the organizer to the caller.

        The assignment row is locked for update on backends that support it, so
        the check and the caller's subsequent write share one transaction.
        """
        self.require_kind(identity, AccountKind.ORGANIZATION)

        stmt: Select[tuple[AssignmentModel, str]] = (
            select(AssignmentModel, EventModel.organizer_id)
            .join(RoleModel, RoleModel.id == AssignmentModel.role_id)
            .join(EventModel, EventModel.id == RoleModel.event_id)
            .where(AssignmentModel.id == assignment_id)
            .with_for_update(of=AssignmentModel)
        )
        row = (await session.execute(stmt)).first()
        if row is None:
            raise NotFoundError(f"Attendance record {assignment_id} not found")

        assignment, organizer_id = row
        if organizer_id != identity.account_id:
            self._ownership_denied(identity, assignment_id=assignment_id)
        return assignment

    def _ownership_denied(self, identity: Identity, **target: str) -> NoReturn:
        logger.warning("ownership_denied", account_id=identity.account_id, **target)
        raise AuthorizationError("You do not manage this event")
