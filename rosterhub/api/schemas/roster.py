from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AssignmentItem(BaseModel):
    id: str
    volunteer_id: str
    role_id: str
    attended: bool


class SignupResponse(BaseModel):
    message: str = Field(default="Signed up successfully")
    assignment: AssignmentItem


class RosterItem(BaseModel):
    assignment_id: str
    volunteer_id: str
    volunteer_name: str
    volunteer_email: str
    role_id: str
    role_name: str
    attended: bool


class RosterResponse(BaseModel):
    event_id: str
    volunteers: list[RosterItem]


class AttendanceUpdate(BaseModel):
    attended: bool


class ProfileEvent(BaseModel):
    assignment_id: str
    event_id: str
    title: str
    date: datetime
    location: str | None = None
    organizer_name: str | None = None
    role_name: str
    attended: bool


class VolunteerStatsResponse(BaseModel):
    total_events: int
    total_hours: int


class VolunteerProfileResponse(BaseModel):
    upcoming: list[ProfileEvent]
    past: list[ProfileEvent]
    stats: VolunteerStatsResponse
