from app.models.event import Event, EVENT_MODES
from app.models.booking import Booking

__all__ = ["Event", "EVENT_MODES", "Booking"]
