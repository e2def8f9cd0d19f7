"""
Canonical forms for user-submitted event fields.

  - time:  free-form "9:00", "09:00 PM", "21:30"  ->  "HH:MM" (24h)
  - date:  free-form "Aug 20, 2024", "08/20/2024" ->  "YYYY-MM-DD" (UTC)
  - slug:  "Node.js & Express.js: REST API!"    ->  "nodejs-expressjs-rest-api"

These are pure functions; anything that needs the database (slug uniqueness)
lives in event_service.
"""

import re
from datetime import timezone
from typing import Optional

from dateutil import parser as date_parser

from app.core.exceptions import ValidationError

# Accepted at the boundary: 24h, or 12h with an AM/PM suffix
_TIME_INPUT = re.compile(r"([0-9]{1,2}):([0-5][0-9])(?:\s*(AM|PM))?", re.IGNORECASE)
# Re-checked by the store before every write
STRICT_TIME = re.compile(r"([0-1]?[0-9]|2[0-3]):[0-5][0-9]")

INVALID_TIME_MESSAGE = "Invalid time format. Use HH:MM or HH:MM AM/PM."
INVALID_DATE_MESSAGE = "Invalid date format. Please provide a valid date."


def normalize_time(raw: Optional[str]) -> Optional[str]:
    """Return zero-padded 24h "HH:MM", or None when `raw` is outside the grammar."""
    if not raw or not isinstance(raw, str):
        return None

    match = _TIME_INPUT.fullmatch(raw.strip())
    if not match:
        return None

    hours = int(match.group(1))
    minutes = match.group(2)
    suffix = match.group(3)

    if suffix:
        if not 1 <= hours <= 12:
            return None
        is_pm = suffix.upper() == "PM"
        if is_pm and hours < 12:
            hours += 12
        elif not is_pm and hours == 12:
            hours = 0
    elif hours > 23:
        return None

    return f"{hours:02d}:{minutes}"


def is_strict_time(value: str) -> bool:
    return bool(STRICT_TIME.fullmatch(value or ""))


def normalize_date(raw: Optional[str]) -> str:
    """
    Parse a free-form date and return the ISO calendar date of that instant in UTC.

    Naive values are read as UTC; values with an offset are converted first,
    so "2024-08-20T23:30:00-05:00" becomes "2024-08-21".

    Raises ValidationError (field "date") when nothing sensible can be parsed.
    """
    if not raw or not str(raw).strip():
        raise ValidationError({"date": INVALID_DATE_MESSAGE})

    try:
        parsed = date_parser.parse(str(raw).strip())
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError) as e:
        raise ValidationError({"date": INVALID_DATE_MESSAGE}) from e

    return parsed.date().isoformat()


def slugify(title: str) -> str:
    """
    URL-safe candidate slug for `title`. Idempotent: slugify(slugify(t)) == slugify(t).

    May return an empty string (e.g. a title made only of punctuation);
    callers decide whether that is acceptable.
    """
    slug = (title or "").lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")
