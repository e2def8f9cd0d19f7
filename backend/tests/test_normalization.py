"""
Tests for time, date and slug normalization.
"""

import re

import pytest

from app.core.exceptions import ValidationError
from app.services.normalization import is_strict_time, normalize_date, normalize_time, slugify

CANONICAL_TIME = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")
ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@pytest.mark.parametrize("raw, expected", [
    ("09:00 AM", "09:00"),
    ("9:00 am", "09:00"),
    ("21:30", "21:30"),
    ("9:00", "09:00"),
    ("0:05", "00:05"),
    ("12:00 AM", "00:00"),
    ("12:15 PM", "12:15"),
    ("1:45PM", "13:45"),
    ("11:59 pm", "23:59"),
    ("  07:30  ", "07:30"),
])
def test_normalize_time_accepts_grammar(raw, expected):
    result = normalize_time(raw)
    assert result == expected
    assert CANONICAL_TIME.match(result)


@pytest.mark.parametrize("raw", [
    "", None, "24:00", "9", "9:7", "09:60", "noon", "13:00 PM", "0:30 AM", "9.30", "09:00 XM", "09:00:00",
    "\u0669:30", "\uff10\uff19:00",
])
def test_normalize_time_rejects_everything_else(raw):
    assert normalize_time(raw) is None


def test_strict_time_is_24_hour_only():
    assert is_strict_time("23:59")
    assert is_strict_time("7:05")
    assert not is_strict_time("09:00 AM")
    assert not is_strict_time("24:00")
    assert not is_strict_time("")
    assert not is_strict_time("09:00\n")
    assert not is_strict_time("\u0669:30")


@pytest.mark.parametrize("raw, expected", [
    ("2026-08-20", "2026-08-20"),
    ("Aug 20, 2026", "2026-08-20"),
    ("08/20/2026", "2026-08-20"),
    ("20 August 2026", "2026-08-20"),
    ("2026-08-20T23:30:00-05:00", "2026-08-21"),
    ("2026-08-20T01:00:00+02:00", "2026-08-19"),
])
def test_normalize_date_returns_utc_calendar_date(raw, expected):
    result = normalize_date(raw)
    assert result == expected
    assert ISO_DATE.match(result)


@pytest.mark.parametrize("raw", ["", "   ", "not a date", "2026-02-30", "13/45/2026"])
def test_normalize_date_rejects_unparseable(raw):
    with pytest.raises(ValidationError) as exc_info:
        normalize_date(raw)
    assert "date" in exc_info.value.details


@pytest.mark.parametrize("raw", ["0001-01-01T00:30:00+05:00", "9999-12-31T23:30:00-05:00"])
def test_normalize_date_offset_past_calendar_edge(raw):
    with pytest.raises(ValidationError) as exc_info:
        normalize_date(raw)
    assert exc_info.value.details == {"date": "Invalid date format. Please provide a valid date."}


def test_slugify_strips_punctuation():
    assert slugify("Node.js & Express.js: REST API!") == "nodejs-expressjs-rest-api"


@pytest.mark.parametrize("title, expected", [
    ("  React Summit 2026  ", "react-summit-2026"),
    ("Hello -- World", "hello-world"),
    ("---Edge---", "edge"),
    ("Café Meetup", "caf-meetup"),
    ("snake_case talk", "snake_case-talk"),
    ("!!!", ""),
])
def test_slugify_examples(title, expected):
    assert slugify(title) == expected


@pytest.mark.parametrize("title", [
    "Node.js & Express.js: REST API!",
    "  Multiple   spaces\tand\ttabs ",
    "-- leading and trailing --",
    "Ünïcödé Ëvent 2026",
    "a - b - c",
    "__init__ day",
])
def test_slugify_is_idempotent(title):
    once = slugify(title)
    assert slugify(once) == once
