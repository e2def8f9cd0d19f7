"""
Booking service: referential guard in front of every booking write.

Order of checks:
  1. Normalize the email (trim + lower-case) and validate its shape
  2. Resolve event_id against the event store
  3. INSERT

Both checks run before anything is written, so a rejected booking never
leaves a row behind. The check-then-write is not atomic; events are never
deleted, so the referenced event cannot disappear in between.
"""

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.core.exceptions import DanglingReferenceError, ValidationError
from app.core.logging import get_logger
from app.core.metrics import record_booking_attempt
from app.services.event_service import get_event_by_id

logger = get_logger(__name__)

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_booking(db: AsyncSession, event_id: int, email: str) -> Booking:
    try:
        email = normalize_email(_email_adapter.validate_python(normalize_email(email)))
    except PydanticValidationError as e:
        record_booking_attempt("invalid")
        logger.info("booking_rejected", reason="invalid_email", event_id=event_id)
        raise ValidationError({"email": "Please provide a valid email address"}) from e

    event = await get_event_by_id(db, event_id)
    if event is None:
        record_booking_attempt("dangling")
        logger.warning("booking_rejected", reason="dangling_event", event_id=event_id)
        raise DanglingReferenceError(
            f"Event with ID {event_id} does not exist. Please provide a valid event ID."
        )

    booking = Booking(event_id=event.id, email=email)
    db.add(booking)
    await db.commit()
    await db.refresh(booking)

    record_booking_attempt("created")
    logger.info("booking_created", booking_id=booking.id, event_id=event.id)
    return booking


async def count_bookings(db: AsyncSession, event_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(Booking).where(Booking.event_id == event_id)
    )
    return result.scalar() or 0
