from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.api.deps import get_db_session, get_guard, raise_http_error, require_kind
from rosterhub.api.schemas.roster import AssignmentItem, SignupResponse
from rosterhub.core.auth import AccountKind
from rosterhub.domain import Identity
from rosterhub.domain.errors import RosterError
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.domain.services.roster import RosterLedger

router = APIRouter(prefix="/roles", tags=["Roles"])


@router.post(
    "/{role_id}/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup_for_role(
    role_id: str,
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    volunteer: Identity = Depends(require_kind(AccountKind.VOLUNTEER)),  # noqa: B008
    guard: AuthorizationGuard = Depends(get_guard),  # noqa: B008
) -> SignupResponse:
    """Claim a role for the calling volunteer. A second claim on the same role is a 400."""
    ledger = RosterLedger(session, guard)
    try:
        assignment = await ledger.signup(volunteer_id=volunteer.account_id, role_id=role_id)
    except RosterError as exc:
        raise_http_error(exc, conflict_status=status.HTTP_400_BAD_REQUEST)

    return SignupResponse(
        assignment=AssignmentItem(
            id=assignment.id,
            volunteer_id=assignment.volunteer_id,
            role_id=assignment.role_id,
            attended=assignment.attended,
        )
    )
