"""
StageVault Kernel — Recording dates

A recording's date carries a precision tag:

  "year"  — only the year is known; recordingDate is stored as Jan 1st of
            that year so date sorting still has a full timestamp
  "full"  — an exact calendar date

Documents written before the tag existed have no datePrecision and are
treated as "full".
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from typing import Any, Literal

from stagevault.kernel.types import field_value

DatePrecision = Literal["year", "full"]

DATE_PRECISIONS: set[str] = {"year", "full"}

YEAR_PATTERN = re.compile(r"^\d{4}$")
FULL_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def _as_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def format_long_date(value: datetime | date) -> str:
    """Day-month-year long form, e.g. "1 January 2025"."""
    return f"{value.day} {MONTH_NAMES[value.month - 1]} {value.year}"


def format_date_display(
    recording_date: Any = None,
    release_year: int | None = None,
    date_precision: str | None = None,
) -> str:
    """
    Text shown for a recording's date.

    Args:
        recording_date: datetime, date, ISO string, or None
        release_year: Release year, used for "year" precision and as fallback
        date_precision: "year", "full", or None (treated as "full")

    Returns:
        "1995", "15 May 2023", or "" when nothing is known
    """
    year_text = str(release_year) if release_year else ""
    if date_precision == "year":
        return year_text

    when = _as_datetime(recording_date)
    if when is not None:
        return format_long_date(when)
    return year_text


def display_date(recording: Any) -> str:
    """format_date_display() over a recording document or model."""
    return format_date_display(
        recording_date=field_value(recording, "recordingDate"),
        release_year=field_value(recording, "releaseYear"),
        date_precision=field_value(recording, "datePrecision"),
    )


def parse_recording_date(
    raw: str | None,
    precision: str = "full",
    now: datetime | None = None,
) -> tuple[datetime, int]:
    """
    Parse the edit-form date field into (recordingDate, releaseYear).

    "year" input is normalized to January 1st of that year. Empty or
    unparseable input falls back to `now` and its year.
    """
    fallback = now or datetime.now(UTC)
    text = (raw or "").strip()
    if not text:
        return fallback, fallback.year

    if precision == "year":
        if YEAR_PATTERN.match(text):
            year = int(text)
            return datetime(year, 1, 1, tzinfo=UTC), year
        return fallback, fallback.year

    try:
        parsed = date.fromisoformat(text[:10])
    except ValueError:
        return fallback, fallback.year
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=UTC), parsed.year


def date_form_value(recording_date: Any, precision: str | None) -> str:
    """Value to pre-fill the edit form: "1995" for year precision, else "YYYY-MM-DD"."""
    when = _as_datetime(recording_date)
    if when is None:
        return ""
    if precision == "year":
        return str(when.year)
    return when.date().isoformat()


def is_valid_date_input(raw: str, precision: str) -> bool:
    """Check the form field against the precision's input pattern."""
    if precision == "year":
        return bool(YEAR_PATTERN.match(raw))
    if not FULL_DATE_PATTERN.match(raw):
        return False
    try:
        date.fromisoformat(raw)
    except ValueError:
        return False
    return True
