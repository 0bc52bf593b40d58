from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class OrganizationModel(Base):
    """SQLAlchemy model for organizations table."""

    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    events: Mapped[list[EventModel]] = relationship(back_populates="organizer")

    def __repr__(self) -> str:
        return f"<OrganizationModel(id={self.id}, email={self.email})>"


class VolunteerModel(Base):
    """SQLAlchemy model for volunteers table."""

    __tablename__ = "volunteers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    interests: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    assignments: Mapped[list[AssignmentModel]] = relationship(back_populates="volunteer")

    def __repr__(self) -> str:
        return f"<VolunteerModel(id={self.id}, email={self.email})>"


class EventModel(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    organizer_id: Mapped[str] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    organizer: Mapped[OrganizationModel] = relationship(back_populates="events")
    roles: Mapped[list[RoleModel]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="RoleModel.position",
    )


class RoleModel(Base):
    __tablename__ = "roles"
    __table_args__ = (
        CheckConstraint("required_volunteers >= 0", name="required_volunteers_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    required_volunteers: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Order in which the organizer listed the role
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    event: Mapped[EventModel] = relationship(back_populates="roles")
    assignments: Mapped[list[AssignmentModel]] = relationship(
        back_populates="role",
        cascade="all, delete-orphan",
    )


class AssignmentModel(Base):
    """A volunteer's claim on a role."""

    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("volunteer_id", "role_id", name="uq_assignment_volunteer_role"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    volunteer_id: Mapped[str] = mapped_column(
        ForeignKey("volunteers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role_id: Mapped[str] = mapped_column(
        ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    attended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    volunteer: Mapped[VolunteerModel] = relationship(back_populates="assignments")
    role: Mapped[RoleModel] = relationship(back_populates="assignments")
