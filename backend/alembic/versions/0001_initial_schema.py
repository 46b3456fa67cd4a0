"""Initial medication routine schema.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_WEEKDAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")
_SLOTS = ("MORNING", "AFTERNOON", "EVENING", "NIGHT")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("last_reminded_on", sa.String(length=10)),
        *_timestamps(),
    )

    op.create_table(
        "push_tokens",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("token", sa.String(length=512), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_push_tokens_user_id", "push_tokens", ["user_id"])

    op.create_table(
        "predefined_medicines",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "user_defined_medicines",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        "ix_user_defined_medicines_user_id", "user_defined_medicines", ["user_id"]
    )

    op.create_table(
        "routines",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_routines_user_id", "routines", ["user_id"])

    op.create_table(
        "routine_medicines",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "routine_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("routines.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "medicine_type",
            sa.Enum("PREDEFINED", "USER_DEFINED", name="medicinetype"),
            nullable=False,
        ),
        sa.Column("medicine_id", sa.Uuid(as_uuid=True), nullable=False),
    )
    op.create_index("ix_routine_medicines_routine_id", "routine_medicines", ["routine_id"])
    op.create_index(
        "ix_routine_medicines_medicine_id", "routine_medicines", ["medicine_id"]
    )

    op.create_table(
        "routine_medicine_schedules",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "routine_medicine_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("routine_medicines.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("day", sa.Enum(*_WEEKDAYS, name="weekday"), nullable=False),
        sa.Column("slots", sa.JSON(), nullable=False),
    )
    op.create_index(
        "ix_routine_medicine_schedules_routine_medicine_id",
        "routine_medicine_schedules",
        ["routine_medicine_id"],
    )

    op.create_table(
        "takens",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "routine_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("routines.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "routine_medicine_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("routine_medicines.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column(
            "day",
            postgresql.ENUM(*_WEEKDAYS, name="weekday", create_type=False),
            nullable=False,
        ),
        sa.Column("slot", sa.Enum(*_SLOTS, name="timeslot"), nullable=False),
        sa.Column("taken_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "routine_id",
            "routine_medicine_id",
            "date",
            "slot",
            name="uq_takens_routine_medicine_date_slot",
        ),
    )
    op.create_index("ix_takens_routine_id", "takens", ["routine_id"])


def downgrade() -> None:
    op.drop_index("ix_takens_routine_id", table_name="takens")
    op.drop_table("takens")
    sa.Enum(name="timeslot").drop(op.get_bind(), checkfirst=False)

    op.drop_index(
        "ix_routine_medicine_schedules_routine_medicine_id",
        table_name="routine_medicine_schedules",
    )
    op.drop_table("routine_medicine_schedules")
    sa.Enum(name="weekday").drop(op.get_bind(), checkfirst=False)

    op.drop_index("ix_routine_medicines_medicine_id", table_name="routine_medicines")
    op.drop_index("ix_routine_medicines_routine_id", table_name="routine_medicines")
    op.drop_table("routine_medicines")
    sa.Enum(name="medicinetype").drop(op.get_bind(), checkfirst=False)

    op.drop_index("ix_routines_user_id", table_name="routines")
    op.drop_table("routines")

    op.drop_index(
        "ix_user_defined_medicines_user_id", table_name="user_defined_medicines"
    )
    op.drop_table("user_defined_medicines")
    op.drop_table("predefined_medicines")

    op.drop_index("ix_push_tokens_user_id", table_name="push_tokens")
    op.drop_table("push_tokens")
    op.drop_table("users")
