"""Initial schema: events and bookings with indexes and constraints.

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


def upgrade() -> None:
    # Events table
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(320), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("overview", sa.Text(), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("location", sa.String(255), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time", sa.String(5), nullable=False),
        sa.Column("mode", sa.String(10), nullable=False),
        sa.Column("audience", sa.String(255), nullable=False),
        sa.Column("organizer", sa.Text(), nullable=False),
        sa.Column("agenda", sa.JSON(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        # SLUG UNIQUENESS: the service pre-checks slugs, but two concurrent
        # submissions with the same title can both pass that check.
        # This constraint makes the second INSERT fail so the service retries.
        sa.UniqueConstraint("slug", name="uq_events_slug"),
        sa.CheckConstraint("mode IN ('online', 'offline', 'hybrid')", name="check_event_mode"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    # Listing is ORDER BY created_at DESC
    op.create_index("ix_events_created_at", "events", ["created_at"])

    # Bookings table
    # event_id is intentionally not a FOREIGN KEY: existence is checked at write time
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_event_id", "bookings", ["event_id"])
    # Duplicate lookups (same email for the same event)
    op.create_index("ix_bookings_event_email", "bookings", ["event_id", "email"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("events")
