"""Initial schema: universities, events, event categories, users, user_events.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "universities",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("tz", sa.String(64), nullable=False, server_default=sa.text("'UTC'")),
        sa.Column("center_lat", sa.Float(), nullable=False),
        sa.Column("center_lng", sa.Float(), nullable=False),
    )

    op.create_table(
        "events",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("university_id", sa.String(64), sa.ForeignKey("universities.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("coords_lat", sa.Float(), nullable=True),
        sa.Column("coords_lng", sa.Float(), nullable=True),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("popularity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("dedupe_key", sa.String(512), nullable=False),
        sa.Column("source_ids", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("popularity >= 0", name="check_event_popularity_non_negative"),
    )
    # The listing query is always "this university, start >= now, ORDER BY start"
    op.create_index("ix_events_university_start", "events", ["university_id", "start"])
    op.create_index("ix_events_dedupe_key", "events", ["dedupe_key"])

    op.create_table(
        "event_categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(64), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.UniqueConstraint("event_id", "name", name="uq_event_category"),
    )
    op.create_index("ix_event_categories_event_id", "event_categories", ["event_id"])
    # Interest filtering looks events up by tag name
    op.create_index("ix_event_categories_name", "event_categories", ["name"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("university_id", sa.String(64), sa.ForeignKey("universities.id"), nullable=False),
        sa.Column("interests", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "user_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_id", sa.String(64), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'going'")),
        sa.Column("custom_fields", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "event_id", name="uq_user_event"),
        sa.CheckConstraint(
            "status IN ('going', 'interested', 'cancelled')", name="check_user_event_status"
        ),
    )
    op.create_index("ix_user_events_id", "user_events", ["id"])
    op.create_index("ix_user_events_user_id", "user_events", ["user_id"])
    op.create_index("ix_user_events_event_id", "user_events", ["event_id"])


def downgrade() -> None:
    op.drop_table("user_events")
    op.drop_table("users")
    op.drop_table("event_categories")
    op.drop_table("events")
    op.drop_table("universities")
