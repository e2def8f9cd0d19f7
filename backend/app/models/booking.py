"""
Booking model representing one email signup for one event.

Key design decisions:
- `event_id` is a weak reference with no FOREIGN KEY: existence is checked by
  the booking service at write time
- Composite (event_id, email) index supports duplicate lookups; duplicates
  are not rejected
"""

from sqlalchemy import Column, Integer, String, Index

from app.db.base import Base, TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, nullable=False, index=True)
    email = Column(String(320), nullable=False)

    __table_args__ = (
        Index("ix_bookings_event_email", "event_id", "email"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, email={self.email})>"
