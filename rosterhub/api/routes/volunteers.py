from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from rosterhub.api.deps import (
    get_clock,
    get_db_session,
    get_guard,
    raise_http_error,
    require_kind,
)
from rosterhub.api.schemas.roster import (
    ProfileEvent,
    VolunteerProfileResponse,
    VolunteerStatsResponse,
)
from rosterhub.core.auth import AccountKind
from rosterhub.domain import Identity
from rosterhub.domain.errors import RosterError
from rosterhub.domain.services.attendance import AttendanceAggregator
from rosterhub.domain.services.guard import AuthorizationGuard

router = APIRouter(prefix="/volunteer", tags=["Volunteers"])


@router.get("/profile", response_model=VolunteerProfileResponse)
async def volunteer_profile(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
    volunteer: Identity = Depends(require_kind(AccountKind.VOLUNTEER)),  # noqa: B008
    guard: AuthorizationGuard = Depends(get_guard),  # noqa: B008
    clock: Callable[[], datetime] = Depends(get_clock),  # noqa: B008
) -> VolunteerProfileResponse:
    """Upcoming and past signups of the caller plus attended-event totals."""
    aggregator = AttendanceAggregator(session, guard, clock=clock)
    try:
        profile = await aggregator.volunteer_profile(volunteer.account_id)
    except RosterError as exc:
        raise_http_error(exc)

    return VolunteerProfileResponse(
        upcoming=[ProfileEvent(**asdict(entry)) for entry in profile.upcoming],
        past=[ProfileEvent(**asdict(entry)) for entry in profile.past],
        stats=VolunteerStatsResponse(**asdict(profile.stats)),
    )
