"""Initial roster schema: organizations, volunteers, events, roles, assignments

Revision ID: 202610180001
Revises:
Create Date: 2026-10-18 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610180001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_organizations_email", "organizations", ["email"], unique=True)

    op.create_table(
        "volunteers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("interests", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_volunteers_email", "volunteers", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "organizer_id",
            sa.String(length=36),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])
    op.create_index("ix_events_date", "events", ["date"])

    op.create_table(
        "roles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "event_id",
            sa.String(length=36),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("required_volunteers", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint(
            "required_volunteers >= 0", name="ck_roles_required_volunteers_non_negative"
        ),
    )
    op.create_index("ix_roles_event_id", "roles", ["event_id"])

    op.create_table(
        "assignments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "volunteer_id",
            sa.String(length=36),
            sa.ForeignKey("volunteers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "role_id",
            sa.String(length=36),
            sa.ForeignKey("roles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        # One claim per volunteer and role, enforced by the database
        sa.UniqueConstraint("volunteer_id", "role_id", name="uq_assignment_volunteer_role"),
    )
    op.create_index("ix_assignments_volunteer_id", "assignments", ["volunteer_id"])
    op.create_index("ix_assignments_role_id", "assignments", ["role_id"])


def downgrade() -> None:
    op.drop_index("ix_assignments_role_id", "assignments")
    op.drop_index("ix_assignments_volunteer_id", "assignments")
    op.drop_table("assignments")
    op.drop_index("ix_roles_event_id", "roles")
    op.drop_table("roles")
    op.drop_index("ix_events_date", "events")
    op.drop_index("ix_events_organizer_id", "events")
    op.drop_table("events")
    op.drop_index("ix_volunteers_email", "volunteers")
    op.drop_table("volunteers")
    op.drop_index("ix_organizations_email", "organizations")
    op.drop_table("organizations")
