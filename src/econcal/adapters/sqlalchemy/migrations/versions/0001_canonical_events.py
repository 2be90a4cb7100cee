"""Create canonical_event and event_activity tables.

Revision ID: 0001_canonical_events
Revises:
Create Date: 2026-02-01
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_canonical_events"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "canonical_event",
        sa.Column("event_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("normalized_name", sa.String(), nullable=False),
        sa.Column("currency", sa.String(length=16), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("impact", sa.String(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("original_scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rescheduled_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("timezone_source", sa.String(length=32), nullable=True),
        sa.Column("forecast", sa.String(), nullable=True),
        sa.Column("previous", sa.String(), nullable=True),
        sa.Column("actual", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("sources", sa.Text(), nullable=False),
        sa.Column("created_by", sa.String(length=32), nullable=True),
        sa.Column("winner_source", sa.String(length=32), nullable=True),
        sa.Column("quality_score", sa.Integer(), nullable=True),
        sa.Column("last_seen_in_feed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("event_id", name="pk_canonical_event"),
    )
    op.create_index(
        "ix_canonical_event_currency_scheduled_at",
        "canonical_event",
        ["currency", "scheduled_at"],
    )
    op.create_index("ix_canonical_event_scheduled_at", "canonical_event", ["scheduled_at"])

    op.create_table(
        "event_activity",
        sa.Column("activity_id", sa.String(), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("severity", sa.String(length=16), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("activity_id", name="pk_event_activity"),
    )
    op.create_index("ix_event_activity_created_at", "event_activity", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_event_activity_created_at", table_name="event_activity")
    op.drop_table("event_activity")
    op.drop_index("ix_canonical_event_scheduled_at", table_name="canonical_event")
    op.drop_index("ix_canonical_event_currency_scheduled_at", table_name="canonical_event")
    op.drop_table("canonical_event")
