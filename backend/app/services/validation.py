"""
Field validation for event submissions.

Runs the whole EventCreate schema plus the image check in one pass and
reports every offending field at once, so a user can fix the form in a
single round trip.
"""

from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.schemas.event import EventCreate

logger = get_logger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "form", "header", "cookie"}
# Fields whose "required" message does not follow "<Field> is required"
MISSING_FIELD_MESSAGES = {
    "tags": "Tags are required",
    "event_id": "Event ID is required",
}


def field_errors(errors: Iterable[dict]) -> dict[str, str]:
    """Collapse pydantic error dicts into {field: first message}."""
    details: dict[str, str] = {}
    for error in errors:
        loc = [part for part in error.get("loc", ()) if part not in _LOCATION_PREFIXES]
        field = str(loc[0]) if loc else "__root__"
        if field in details:
            continue

        if error.get("type") == "missing":
            message = MISSING_FIELD_MESSAGES.get(field, f"{field.capitalize()} is required")
        elif error.get("type") == "value_error" and "error" in error.get("ctx", {}):
            message = str(error["ctx"]["error"])
        else:
            message = error.get("msg", "Invalid value")
        details[field] = message
    return details


def validate_event_submission(
    fields: Mapping[str, Any],
    image: Optional[bytes],
) -> EventCreate:
    """
    Validate raw form fields and the image payload.

    `fields` may hold None for absent form fields; those are reported as
    missing. Raises ValidationError with the complete field -> message map.
    """
    details: dict[str, str] = {}
    submission: Optional[EventCreate] = None

    data = {key: value for key, value in fields.items() if value is not None}
    try:
        submission = EventCreate.model_validate(data)
    except PydanticValidationError as e:
        details.update(field_errors(e.errors()))

    if not image:
        details["image"] = "Image file is required"

    if details:
        logger.info("event_submission_rejected", fields=sorted(details))
        raise ValidationError(details)

    return submission
