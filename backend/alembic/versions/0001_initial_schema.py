"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Creates the scheduling tables: shows, events, event_generation_logs.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REPEAT_PATTERNS = ("none", "daily", "weekly", "biweekly", "monthly")
SHOW_STATUSES = ("active", "paused", "completed", "cancelled")
EVENT_STATUSES = ("scheduled", "live", "completed", "cancelled", "postponed")
TRIGGER_REASONS = ("new_show", "show_update", "maintenance")


def upgrade() -> None:
    # --- shows ---
    op.create_table(
        "shows",
        sa.Column("show_id", sa.String(36), primary_key=True),
        sa.Column("show_name", sa.String(255), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("start_time", sa.Time, nullable=False),
        sa.Column("length_minutes", sa.Integer, nullable=False, server_default="60"),
        sa.Column("first_event_date", sa.Date, nullable=False),
        sa.Column("repeat_pattern", sa.Enum(*REPEAT_PATTERNS, name="repeatpattern"), nullable=False),
        sa.Column("scheduling_config", sa.JSON, nullable=True),
        sa.Column("status", sa.Enum(*SHOW_STATUSES, name="showstatus"), nullable=False, server_default="active"),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("length_minutes > 0", name="ck_shows_length_positive"),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("show_id", sa.String(36), sa.ForeignKey("shows.show_id"), nullable=False),
        sa.Column("event_title", sa.String(500), nullable=True),
        sa.Column("event_description", sa.Text, nullable=True),
        sa.Column("length_minutes", sa.Integer, nullable=True),
        sa.Column("start_datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.Enum(*EVENT_STATUSES, name="eventstatus"), nullable=False, server_default="scheduled"),
        sa.Column("is_customized", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("custom_fields", sa.JSON, nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("show_version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("end_datetime > start_datetime", name="ck_events_valid_timing"),
        sa.CheckConstraint("length_minutes IS NULL OR length_minutes > 0", name="ck_events_valid_length"),
    )
    op.create_index("ix_events_show_id", "events", ["show_id"])
    op.create_index("ix_events_start_datetime", "events", ["start_datetime"])
    op.create_index("ix_events_show_version", "events", ["show_id", "show_version"])
    op.create_index(
        "uq_events_show_start_live",
        "events",
        ["show_id", "start_datetime"],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )

    # --- event_generation_logs ---
    op.create_table(
        "event_generation_logs",
        sa.Column("log_id", sa.String(36), primary_key=True),
        sa.Column("show_id", sa.String(36), sa.ForeignKey("shows.show_id"), nullable=False),
        sa.Column("generation_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("events_generated", sa.Integer, nullable=False),
        sa.Column("generated_until", sa.DateTime(timezone=True), nullable=False),
        sa.Column("trigger_reason", sa.Enum(*TRIGGER_REASONS, name="triggerreason"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_event_generation_logs_show_id", "event_generation_logs", ["show_id"])
    op.create_index("ix_event_generation_logs_generation_date", "event_generation_logs", ["generation_date"])


def downgrade() -> None:
    op.drop_table("event_generation_logs")
    op.drop_table("events")
    op.drop_table("shows")
    for enum_name in ("triggerreason", "eventstatus", "showstatus", "repeatpattern"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
