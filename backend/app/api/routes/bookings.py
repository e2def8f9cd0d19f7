"""
Booking endpoints: email signup for an existing event.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.booking import BookingCreate, BookingResponse
from app.schemas.error import ErrorResponse
from app.services.booking_service import create_booking

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Book an event with an email address.

    The email is stored trimmed and lower-cased. Returns 404 when the event
    does not exist; nothing is written in that case.
    """
    return await create_booking(db, booking_data.event_id, booking_data.email)
