"""
Event endpoints: listing (Redis-cached), detail by slug, creation via
multipart form with image upload, partial update and related lookups.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import EventForm, get_image_uploader
from app.db.session import get_db
from app.models.event import Event
from app.schemas.booking import BookingCountResponse
from app.schemas.error import ErrorResponse
from app.schemas.event import EventUpdate, EventResponse, EventListResponse
from app.services.booking_service import count_bookings
from app.services.cache_service import get_cached_events, set_cached_events, invalidate_event_cache
from app.services.event_service import (
    create_event,
    find_similar_events,
    get_event_by_slug,
    list_events,
    update_event,
)
from app.services.upload_service import CloudinaryUploader
from app.services.validation import validate_event_submission
from app.core.exceptions import ConflictError, NotFoundError, UpstreamError, ValidationError
from app.core.metrics import record_event_creation
from app.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


def _sanitize_slug(slug: str) -> str:
    cleaned = (slug or "").strip().lower()
    if not cleaned:
        raise ValidationError({"slug": "Invalid or missing slug parameter"})
    return cleaned


async def _require_event(db: AsyncSession, slug: str) -> Event:
    slug = _sanitize_slug(slug)
    event = await get_event_by_slug(db, slug)
    if event is None:
        raise NotFoundError(f"Event with slug '{slug}' not found")
    return event


@router.post(
    "/",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_event_endpoint(
    form: EventForm = Depends(),
    db: AsyncSession = Depends(get_db),
    uploader: CloudinaryUploader = Depends(get_image_uploader),
):
    """
    Create an event from a multipart form.

    Fields are validated first (all problems reported together), the image is
    uploaded only once the input is valid, then the record goes through the
    store's normalization pipeline.
    """
    image_bytes = await form.image.read() if form.image is not None else None

    try:
        submission = validate_event_submission(form.fields, image_bytes)
        image_url = await uploader.upload(
            image_bytes,
            form.image.filename or "upload",
            form.image.content_type or "application/octet-stream",
        )
        event = await create_event(db, submission, image_url)
    except ValidationError:
        record_event_creation("invalid")
        raise
    except UpstreamError:
        record_event_creation("upload_failed")
        raise
    except ConflictError:
        record_event_creation("conflict")
        raise

    record_event_creation("created")
    # New event changes every listing page
    await invalidate_event_cache()
    return event


@router.get("/", response_model=EventListResponse)
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List events newest first with pagination.
    Results are cached in Redis; cache is invalidated when events change.
    """
    cached = await get_cached_events(page, page_size)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, page, page_size)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump() for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }

    await set_cached_events(page, page_size, response_data)

    return EventListResponse(**response_data)


@router.get("/{slug}", response_model=EventResponse, responses=ERROR_RESPONSES)
async def get_event_endpoint(slug: str, db: AsyncSession = Depends(get_db)):
    """Get a single event by slug (trimmed and lower-cased)."""
    return await _require_event(db, slug)


@router.patch("/{slug}", response_model=EventResponse, responses=ERROR_RESPONSES)
async def update_event_endpoint(
    slug: str,
    changes: EventUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Partially update an event. Changing the title regenerates the slug."""
    event = await update_event(db, _sanitize_slug(slug), changes)
    await invalidate_event_cache()
    return event


@router.get("/{slug}/similar", response_model=list[EventResponse], responses=ERROR_RESPONSES)
async def similar_events_endpoint(
    slug: str,
    limit: int = Query(10, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Other events sharing at least one tag with this one."""
    event = await _require_event(db, slug)
    return await find_similar_events(db, event, limit)


@router.get("/{slug}/bookings/count", response_model=BookingCountResponse, responses=ERROR_RESPONSES)
async def booking_count_endpoint(slug: str, db: AsyncSession = Depends(get_db)):
    event = await _require_event(db, slug)
    total = await count_bookings(db, event.id)
    return BookingCountResponse(event_id=event.id, slug=event.slug, bookings=total)
