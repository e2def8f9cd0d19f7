"""
Pydantic schemas for event-related request/response validation.

EventCreate is the explicit input schema for the creation form: every field
is named and typed, and all violations are collected in one validation pass.
"""

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from app.core.exceptions import ValidationError
from app.models.event import EVENT_MODES
from app.services.normalization import (
    INVALID_TIME_MESSAGE,
    normalize_date,
    normalize_time,
)

# Matches the String(255) columns on Event
SHORT_TEXT_MAX = 255

REQUIRED_TEXT_FIELDS = (
    "title", "description", "overview", "venue", "location", "audience", "organizer",
)
LIST_FIELD_MESSAGES = {
    "tags": "At least one tag is required",
    "agenda": "Agenda must contain at least one item",
}


def _decode_list(value: Any, field_name: str) -> Any:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValueError(f"{field_name.capitalize()} must be a JSON array of strings")
        if not isinstance(value, list):
            raise ValueError(f"{field_name.capitalize()} must be a JSON array of strings")
    return value


def _clean_list(items: list[str], field_name: str) -> list[str]:
    cleaned = [item.strip() for item in items if item and item.strip()]
    if not cleaned:
        raise ValueError(LIST_FIELD_MESSAGES[field_name])
    return cleaned


def _check_mode(value: str) -> str:
    value = value.strip().lower()
    if value not in EVENT_MODES:
        raise ValueError(f"Invalid mode; allowed: {', '.join(EVENT_MODES)}")
    return value


def _check_time(value: str) -> str:
    normalized = normalize_time(value)
    if normalized is None:
        raise ValueError(INVALID_TIME_MESSAGE)
    return normalized


def _check_date(value: str) -> str:
    # Loose gate only: the store performs the authoritative normalization
    value = value.strip()
    try:
        normalize_date(value)
    except ValidationError as e:
        raise ValueError(e.details["date"])
    return value


class EventCreate(BaseModel):
    title: str = Field(max_length=SHORT_TEXT_MAX)
    description: str
    overview: str
    venue: str = Field(max_length=SHORT_TEXT_MAX)
    location: str = Field(max_length=SHORT_TEXT_MAX)
    date: str
    time: str
    mode: str
    audience: str = Field(max_length=SHORT_TEXT_MAX)
    organizer: str
    tags: list[str]
    agenda: list[str]

    @field_validator(*REQUIRED_TEXT_FIELDS)
    @classmethod
    def _required_text(cls, value: str, info) -> str:
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return value

    @field_validator("tags", "agenda", mode="before")
    @classmethod
    def _decode_json_list(cls, value: Any, info) -> Any:
        return _decode_list(value, info.field_name)

    @field_validator("tags", "agenda")
    @classmethod
    def _non_empty_list(cls, value: list[str], info) -> list[str]:
        return _clean_list(value, info.field_name)

    @field_validator("mode")
    @classmethod
    def _allowed_mode(cls, value: str) -> str:
        return _check_mode(value)

    @field_validator("time")
    @classmethod
    def _time_24h(cls, value: str) -> str:
        return _check_time(value)

    @field_validator("date")
    @classmethod
    def _parseable_date(cls, value: str) -> str:
        return _check_date(value)


class EventUpdate(BaseModel):
    """Partial update; omitted fields are left untouched."""

    title: Optional[str] = Field(None, max_length=SHORT_TEXT_MAX)
    description: Optional[str] = None
    overview: Optional[str] = None
    venue: Optional[str] = Field(None, max_length=SHORT_TEXT_MAX)
    location: Optional[str] = Field(None, max_length=SHORT_TEXT_MAX)
    date: Optional[str] = None
    time: Optional[str] = None
    mode: Optional[str] = None
    audience: Optional[str] = Field(None, max_length=SHORT_TEXT_MAX)
    organizer: Optional[str] = None
    tags: Optional[list[str]] = None
    agenda: Optional[list[str]] = None

    @field_validator(*REQUIRED_TEXT_FIELDS)
    @classmethod
    def _required_text(cls, value: Optional[str], info) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name.capitalize()} cannot be empty")
        return value

    @field_validator("tags", "agenda")
    @classmethod
    def _non_empty_list(cls, value: Optional[list[str]], info) -> Optional[list[str]]:
        return None if value is None else _clean_list(value, info.field_name)

    @field_validator("mode")
    @classmethod
    def _allowed_mode(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_mode(value)

    @field_validator("time")
    @classmethod
    def _time_24h(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_time(value)

    @field_validator("date")
    @classmethod
    def _parseable_date(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_date(value)


class EventResponse(BaseModel):
    id: int
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    organizer: str
    agenda: list[str]
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False

