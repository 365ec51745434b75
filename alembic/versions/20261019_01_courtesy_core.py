"""Courtesy core tables.

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "20261019_01"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_ENUMS = {
    "event_status_enum": ("DRAFT", "PUBLISHED", "COMPLETED", "CANCELLED", "ARCHIVED"),
    "document_type_enum": ("DNI", "CE", "PASSPORT", "RUC", "OTHER"),
    "person_status_enum": ("ACTIVE", "MERGED"),
    "block_type_enum": ("WORKSHOP", "MODULE", "COURSE", "OTHER"),
    "block_status_enum": ("DRAFT", "PUBLISHED", "IN_PROGRESS", "COMPLETED", "CANCELLED"),
    "block_enrollment_status_enum": (
        "PENDING",
        "ENROLLED",
        "IN_PROGRESS",
        "APPROVED",
        "FAILED",
        "WITHDRAWN",
        "CANCELLED",
    ),
    "registration_status_enum": ("PENDING", "CONFIRMED", "CANCELLED", "ATTENDED"),
    "registration_origin_enum": ("PURCHASE", "COURTESY", "TRANSFER"),
    "courtesy_type_enum": ("SPEAKER", "VIP", "PRESS", "SPONSOR", "STAFF", "OTHER"),
    "courtesy_scope_enum": ("FULL_EVENT", "SPECIFIC_BLOCKS", "ASSIGNED_SESSIONS_ONLY"),
    "courtesy_status_enum": ("ACTIVE", "USED", "CANCELLED", "EXPIRED"),
}


def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=True)


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*_ENUMS[name], name=name, create_type=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    for name, values in _ENUMS.items():
        labels = ", ".join(f"'{value}'" for value in values)
        op.execute(f"CREATE TYPE {name} AS ENUM ({labels})")

    op.create_table(
        "users",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="ATTENDEE"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="ACTIVE"),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "events",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", _enum("event_status_enum"), nullable=False, server_default="DRAFT"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "event_sessions",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("event_id", _uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_event_sessions_event_id", "event_sessions", ["event_id"])

    op.create_table(
        "speakers",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("profession", sa.String(length=255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_speakers_email", "speakers", ["email"])

    op.create_table(
        "event_speakers",
        sa.Column("event_id", _uuid(), primary_key=True),
        sa.Column("speaker_id", _uuid(), primary_key=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["speaker_id"], ["speakers.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "persons",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("document_type", _enum("document_type_enum"), nullable=False, server_default="DNI"),
        sa.Column("document_number", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("country", sa.String(length=64), nullable=True),
        sa.Column("status", _enum("person_status_enum"), nullable=False, server_default="ACTIVE"),
        sa.Column("flag_data_observed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("user_id", _uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.UniqueConstraint("document_type", "document_number", name="uq_persons_document"),
    )
    op.create_index("ix_persons_email", "persons", ["email"])

    op.create_table(
        "attendees",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("document_type", _enum("document_type_enum"), nullable=False, server_default="DNI"),
        sa.Column("document_number", sa.String(length=32), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("person_id", _uuid(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_attendees_email", "attendees", ["email"])
    op.create_index("ix_attendees_document_number", "attendees", ["document_number"])

    op.create_table(
        "evaluable_blocks",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("event_id", _uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", _enum("block_type_enum"), nullable=False, server_default="WORKSHOP"),
        sa.Column("status", _enum("block_status_enum"), nullable=False, server_default="DRAFT"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("min_attendance_percentage", sa.Integer(), nullable=False, server_default="80"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_evaluable_blocks_event_id", "evaluable_blocks", ["event_id"])

    op.create_table(
        "block_sessions",
        sa.Column("block_id", _uuid(), primary_key=True),
        sa.Column("session_id", _uuid(), primary_key=True),
        sa.ForeignKeyConstraint(["block_id"], ["evaluable_blocks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["session_id"], ["event_sessions.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "courtesies",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("event_id", _uuid(), nullable=False),
        sa.Column("person_id", _uuid(), nullable=False),
        sa.Column("attendee_id", _uuid(), nullable=True),
        sa.Column("speaker_id", _uuid(), nullable=True),
        sa.Column("type", _enum("courtesy_type_enum"), nullable=False, server_default="OTHER"),
        sa.Column("scope", _enum("courtesy_scope_enum"), nullable=False, server_default="FULL_EVENT"),
        sa.Column("status", _enum("courtesy_status_enum"), nullable=False, server_default="ACTIVE"),
        sa.Column("granted_by_id", _uuid(), nullable=True),
        sa.Column("granted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("valid_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("cancelled_by_id", _uuid(), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["person_id"], ["persons.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["attendee_id"], ["attendees.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["speaker_id"], ["speakers.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["granted_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["cancelled_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_courtesies_event_id", "courtesies", ["event_id"])
    op.create_index("ix_courtesies_person_id", "courtesies", ["person_id"])
    op.create_index(
        "uq_courtesies_event_person_open",
        "courtesies",
        ["event_id", "person_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('ACTIVE', 'USED')"),
    )

    op.create_table(
        "courtesy_blocks",
        sa.Column("courtesy_id", _uuid(), primary_key=True),
        sa.Column("block_id", _uuid(), primary_key=True),
        sa.ForeignKeyConstraint(["courtesy_id"], ["courtesies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["block_id"], ["evaluable_blocks.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "registrations",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("attendee_id", _uuid(), nullable=False),
        sa.Column("event_id", _uuid(), nullable=False),
        sa.Column("ticket_code", sa.String(length=64), nullable=False, unique=True),
        sa.Column("original_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("final_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("status", _enum("registration_status_enum"), nullable=False, server_default="PENDING"),
        sa.Column("origin", _enum("registration_origin_enum"), nullable=False, server_default="PURCHASE"),
        sa.Column("courtesy_id", _uuid(), nullable=True),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("attended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("registered_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["attendee_id"], ["attendees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["courtesy_id"], ["courtesies.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_registrations_attendee_id", "registrations", ["attendee_id"])
    op.create_index("ix_registrations_event_id", "registrations", ["event_id"])
    op.create_index("ix_registrations_courtesy_id", "registrations", ["courtesy_id"])

    op.create_table(
        "block_enrollments",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("block_id", _uuid(), nullable=False),
        sa.Column("attendee_id", _uuid(), nullable=False),
        sa.Column("courtesy_id", _uuid(), nullable=True),
        sa.Column("status", _enum("block_enrollment_status_enum"), nullable=False, server_default="PENDING"),
        sa.Column("original_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("discount_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("final_price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("attendance_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("sessions_attended", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_sessions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("meets_attendance_requirement", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("passed", sa.Boolean(), nullable=True),
        sa.Column("retake_attempts_used", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["block_id"], ["evaluable_blocks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["attendee_id"], ["attendees.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["courtesy_id"], ["courtesies.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_block_enrollments_block_id", "block_enrollments", ["block_id"])
    op.create_index("ix_block_enrollments_attendee_id", "block_enrollments", ["attendee_id"])
    op.create_index("ix_block_enrollments_courtesy_id", "block_enrollments", ["courtesy_id"])


def downgrade() -> None:
    op.drop_table("block_enrollments")
    op.drop_table("registrations")
    op.drop_table("courtesy_blocks")
    op.drop_index("uq_courtesies_event_person_open", table_name="courtesies")
    op.drop_table("courtesies")
    op.drop_table("block_sessions")
    op.drop_table("evaluable_blocks")
    op.drop_table("attendees")
    op.drop_table("persons")
    op.drop_table("event_speakers")
    op.drop_table("speakers")
    op.drop_table("event_sessions")
    op.drop_table("events")
    op.drop_table("users")

    for name in reversed(list(_ENUMS)):
        op.execute(f"DROP TYPE IF EXISTS {name}")
