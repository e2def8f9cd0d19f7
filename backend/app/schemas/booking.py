"""
Pydantic schemas for booking-related request/response validation.

Email format is checked by the booking service (after lower-casing and
trimming) so that malformed addresses surface as a field-level 400.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    event_id: int
    email: str = Field(..., max_length=320)


class BookingResponse(BaseModel):
    id: int
    event_id: int
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingCountResponse(BaseModel):
    event_id: int
    slug: str
    bookings: int = Field(..., ge=0)
