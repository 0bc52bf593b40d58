from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.api.deps import get_db_session, get_guard, raise_http_error, require_kind
from rosterhub.api.schemas.roster import AssignmentItem, AttendanceUpdate
from rosterhub.core.auth import AccountKind
from rosterhub.domain import Identity
from rosterhub.domain.errors import RosterError
from rosterhub.domain.services.attendance import AttendanceAggregator
from rosterhub.domain.services.guard import AuthorizationGuard

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.patch("/{record_id}", response_model=AssignmentItem)
async def update_attendance(
    record_id: str,
    payload: AttendanceUpdate,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    organization: Identity = Depends(require_kind(AccountKind.ORGANIZATION)),  # noqa: B008
    guard: AuthorizationGuard = Depends(get_guard),  # noqa: B008
) -> AssignmentItem:
    """Mark a volunteer's assignment attended or not (owning organization only)."""
    aggregator = AttendanceAggregator(session, guard)
    try:
        assignment = await aggregator.set_attendance(
            record_id=record_id,
            attended=payload.attended,
            caller=organization,
        )
    except RosterError as exc:
        raise_http_error(exc)

    return AssignmentItem(
        id=assignment.id,
        volunteer_id=assignment.volunteer_id,
        role_id=assignment.role_id,
        attended=assignment.attended,
    )
