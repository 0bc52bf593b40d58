"""Domain services."""

from rosterhub.domain.services.attendance import AttendanceAggregator
from rosterhub.domain.services.events import EventProvisioner
from rosterhub.domain.services.guard import AuthorizationGuard
from rosterhub.domain.services.identity import IdentityProvider
from rosterhub.domain.services.roster import RosterLedger

__all__ = [
    "AttendanceAggregator",
    "AuthorizationGuard",
    "EventProvisioner",
    "IdentityProvider",
    "RosterLedger",
]
