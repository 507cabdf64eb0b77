"""attendees, facilitators and attendance log

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "facilitators",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("gender", sa.String(10), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_facilitators_first_name", "facilitators", ["first_name"])
    op.create_index("ix_facilitators_gender", "facilitators", ["gender"])

    op.create_table(
        "attendees",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("contact_number", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("school_name", sa.String(200), nullable=False),
        sa.Column("barangay", sa.String(100), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("social_media_name", sa.String(200), nullable=True),
        sa.Column("gender", sa.String(10), nullable=False),
        sa.Column("is_dgroup_member", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("dgroup_leader_name", sa.String(200), nullable=True),
        sa.Column("is_first_timer", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "facilitator_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("facilitators.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_attendees_contact_number", "attendees", ["contact_number"], unique=True)
    op.create_index("ix_attendees_facilitator_id", "attendees", ["facilitator_id"])

    op.create_table(
        "attendance_log",
        sa.Column("id", sa.Uuid(as_uuid=False), primary_key=True),
        sa.Column(
            "attendee_id",
            sa.Uuid(as_uuid=False),
            sa.ForeignKey("attendees.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("service_date", sa.Date(), nullable=False),
        sa.Column("check_in_time", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("attendee_id", "service_date", name="uq_attendance_log_attendee_date"),
    )
    op.create_index("ix_attendance_log_attendee_id", "attendance_log", ["attendee_id"])
    op.create_index("ix_attendance_log_service_date", "attendance_log", ["service_date"])


def downgrade() -> None:
    op.drop_table("attendance_log")
    op.drop_table("attendees")
    op.drop_table("facilitators")
