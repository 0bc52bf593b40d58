from rosterhub.core.auth import AccountKind
from rosterhub.domain.models import (
    Account,
    AssignmentView,
    EventView,
    Identity,
    OrganizationAccount,
    ProfileEntry,
    RoleSpec,
    RoleView,
    RosterEntry,
    VolunteerAccount,
    VolunteerProfile,
    VolunteerStats,
    to_public,
)

__all__ = [
    "Account",
    "AccountKind",
    "AssignmentView",
    "EventView",
    "Identity",
    "OrganizationAccount",
    "ProfileEntry",
    "RoleSpec",
    "RoleView",
    "RosterEntry",
    "VolunteerAccount",
    "VolunteerProfile",
    "VolunteerStats",
    "to_public",
]
