from app.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from app.schemas.booking import BookingCreate, BookingResponse, BookingCountResponse
from app.schemas.error import ErrorResponse

__all__ = [
    "EventCreate", "EventUpdate", "EventResponse", "EventListResponse",
    "BookingCreate", "BookingResponse", "BookingCountResponse",
    "ErrorResponse",
]
