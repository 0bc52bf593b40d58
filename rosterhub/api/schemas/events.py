from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RoleCreate(BaseModel):
    name: str = Field(..., max_length=255)
    description: str | None = None
    # Headcount is checked by the provisioner so a negative value is a 400, not a 422
    required_volunteers: int = Field(default=1, alias="requiredVolunteers")

    model_config = {"populate_by_name": True}


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    date: datetime
    location: str | None = Field(None, max_length=255)
    roles: list[RoleCreate] = Field(default_factory=list)


class RoleItem(BaseModel):
    id: str
    event_id: str
    name: str
    description: str | None = None
    required_volunteers: int
    claimed_count: int


class EventItem(BaseModel):
    id: str
    organizer_id: str
    organizer_name: str | None = None
    title: str
    description: str | None = None
    date: datetime
    location: str | None = None
    role_count: int


class EventsResponse(BaseModel):
    events: list[EventItem]


class EventDetail(EventItem):
    roles: list[RoleItem]
