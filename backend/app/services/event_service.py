"""
Event service: the record store and its pre-commit normalization pipeline.

SLUG UNIQUENESS STRATEGY: Pre-check + Retry on Constraint Violation
===================================================================

Problem:
  Two organizers submit "Python Meetup" at the same instant.
  Both look up "python-meetup", both see it free, both insert.

Solution:
  1. Derive the candidate slug from the title
  2. If another event already holds it, append a millisecond timestamp
  3. INSERT; the UNIQUE constraint on events.slug is authoritative
  4. If the INSERT hits that constraint, roll back and retry with a fresh,
     strictly increasing timestamp suffix
  5. After SLUG_MAX_RETRIES failed attempts, raise ConflictError (409)

  The pre-check keeps the common case to a single INSERT; the retry loop is
  what makes the race safe.
"""

import time
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import Event
from app.schemas.event import EventCreate, EventUpdate
from app.core.config import get_settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.metrics import slug_retries
from app.services.normalization import (
    INVALID_TIME_MESSAGE,
    is_strict_time,
    normalize_date,
    slugify,
)

logger = get_logger(__name__)

MAX_EVENT_ID = 2**31 - 1

_last_disambiguator = 0


def _disambiguator() -> int:
    """Current time in ms, never repeating within this process."""
    global _last_disambiguator
    _last_disambiguator = max(int(time.time() * 1000), _last_disambiguator + 1)
    return _last_disambiguator


def _is_slug_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "slug" in message


async def _slug_in_use(db: AsyncSession, slug: str, exclude_id: Optional[int] = None) -> bool:
    query = select(Event.id).where(Event.slug == slug)
    if exclude_id is not None:
        query = query.where(Event.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


def _candidate_slug(title: str) -> str:
    candidate = slugify(title)
    if not candidate:
        raise ValidationError({"title": "Title must contain at least one letter or number"})
    return candidate


async def generate_unique_slug(
    db: AsyncSession,
    title: str,
    exclude_id: Optional[int] = None,
) -> str:
    """Slug for `title`, suffixed with a timestamp if another event holds it."""
    candidate = _candidate_slug(title)
    if await _slug_in_use(db, candidate, exclude_id):
        return f"{candidate}-{_disambiguator()}"
    return candidate


def _normalized_schedule(date: str, time_value: str) -> tuple[str, str]:
    """Authoritative date/time normalization applied right before a write."""
    details = {}
    try:
        date = normalize_date(date)
    except ValidationError as e:
        details.update(e.details)
    if not is_strict_time(time_value):
        details["time"] = INVALID_TIME_MESSAGE
    if details:
        raise ValidationError(details)
    return date, time_value


async def create_event(db: AsyncSession, event_data: EventCreate, image_url: str) -> Event:
    """
    Persist a validated submission.

    Pipeline: image URL present -> date normalization -> strict time check ->
    unique slug -> INSERT (retrying on slug conflicts). Any stage failing
    aborts the write.
    """
    if not image_url or not image_url.strip():
        raise ValidationError({"image": "Image is required"})

    date, time_value = _normalized_schedule(event_data.date, event_data.time)
    fields = event_data.model_dump(exclude={"date", "time"})
    max_attempts = max(get_settings().SLUG_MAX_RETRIES, 1)

    for attempt in range(1, max_attempts + 1):
        # Step 1: candidate slug (pre-checked on the first attempt only)
        if attempt == 1:
            slug = await generate_unique_slug(db, event_data.title)
        else:
            slug = f"{_candidate_slug(event_data.title)}-{_disambiguator()}"

        # Step 2: INSERT; the unique constraint decides
        event = Event(**fields, slug=slug, date=date, time=time_value, image=image_url.strip())
        db.add(event)
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if not _is_slug_violation(e):
                raise
            slug_retries.inc()
            logger.info(
                "slug_conflict_retry",
                slug=slug,
                attempt=attempt,
            )
            if attempt == max_attempts:
                raise ConflictError(
                    f"Could not allocate a unique slug for '{event_data.title}'. Please try again."
                )
            continue

        await db.commit()
        await db.refresh(event)

        logger.info("event_created", event_id=event.id, slug=event.slug, attempt=attempt)
        return event

    # Unreachable: the last attempt either returns or raises
    raise ConflictError()


async def update_event(db: AsyncSession, slug: str, changes: EventUpdate) -> Event:
    """
    Apply a partial update. The slug is recomputed only when the title
    changes; date and time are re-normalized only when they change.
    """
    event = await get_event_by_slug(db, slug)
    if event is None:
        raise NotFoundError(f"Event with slug '{slug}' not found")

    data = changes.model_dump(exclude_unset=True, exclude_none=True)

    if "date" in data or "time" in data:
        data["date"], data["time"] = _normalized_schedule(
            data.get("date", event.date), data.get("time", event.time)
        )

    if "title" in data and data["title"] != event.title:
        data["slug"] = await generate_unique_slug(db, data["title"], exclude_id=event.id)

    for field, value in data.items():
        setattr(event, field, value)

    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        if _is_slug_violation(e):
            raise ConflictError(f"Slug '{data.get('slug')}' is already taken") from e
        raise

    await db.commit()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, slug=event.slug, fields=sorted(data))
    return event


async def get_event_by_slug(db: AsyncSession, slug: str) -> Optional[Event]:
    result = await db.execute(select(Event).where(Event.slug == slug))
    return result.scalar_one_or_none()


async def get_event_by_id(db: AsyncSession, event_id: int) -> Optional[Event]:
    # Ids outside the INTEGER column range cannot name a row
    if not 1 <= event_id <= MAX_EVENT_ID:
        return None
    return await db.get(Event, event_id)


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Event], int]:
    """
    List events newest first with pagination.
    Uses the ix_events_created_at index; id breaks ties between same-second inserts.
    """
    total = (await db.execute(select(func.count()).select_from(Event))).scalar()

    events_query = (
        select(Event)
        .order_by(Event.created_at.desc(), Event.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total


async def find_similar_events(db: AsyncSession, event: Event, limit: int = 10) -> list[Event]:
    """Other events sharing at least one tag with `event`, newest first."""
    tags = set(event.tags or [])
    if not tags:
        return []

    # Tags live in a JSON column; overlap is computed here to stay dialect-neutral
    result = await db.execute(
        select(Event)
        .where(Event.id != event.id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    similar = [other for other in result.scalars() if tags.intersection(other.tags or [])]
    return similar[:limit]
