"""
Event model for community event listings.

Key design decisions:
- `slug` carries a UNIQUE constraint: the database is the final arbiter of
  slug uniqueness, the service-level pre-check is only an optimisation
- `date` and `time` are stored as canonical strings (YYYY-MM-DD, HH:MM)
- `agenda` and `tags` are JSON lists so the same schema runs on PostgreSQL
  and SQLite
- `mode` is restricted at the DB level with a CHECK constraint
"""

from sqlalchemy import Column, Integer, String, Text, JSON, Index, CheckConstraint, UniqueConstraint

from app.db.base import Base, TimestampMixin

EVENT_MODES = ("online", "offline", "hybrid")


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(320), nullable=False)
    description = Column(Text, nullable=False)
    overview = Column(Text, nullable=False)
    image = Column(Text, nullable=False)
    venue = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)
    time = Column(String(5), nullable=False)
    mode = Column(String(10), nullable=False)
    audience = Column(String(255), nullable=False)
    organizer = Column(Text, nullable=False)
    agenda = Column(JSON, nullable=False)
    tags = Column(JSON, nullable=False)

    __table_args__ = (
        UniqueConstraint("slug", name="uq_events_slug"),
        CheckConstraint("mode IN ('online', 'offline', 'hybrid')", name="check_event_mode"),
        # Listing is always newest first
        Index("ix_events_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, slug={self.slug}, date={self.date} {self.time})>"
