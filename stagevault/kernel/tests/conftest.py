"""
Kernel test configuration.

Shared catalogue fixtures. Kernel tests are synchronous except for the
infinite feed, and need no store or app.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest


def _recording(rec_id: str, title: str, when: datetime, **extra) -> dict:
    return {
        "id": rec_id,
        "title": title,
        "recordingDate": when,
        "releaseYear": when.year,
        "theatreName": "Royal Opera House",
        "city": "London",
        "artistNames": ["John Doe", "Jane Smith"],
        "artistIds": ["person-1", "person-2"],
        "composerIds": ["person-3"],
        "lyricistIds": ["person-4"],
        **extra,
    }


@pytest.fixture
def opera_recordings() -> list[dict]:
    """La Bohème, Carmen and The Magic Flute, in insertion order."""
    return [
        _recording("recording-1", "La Bohème", datetime(2023, 5, 15, tzinfo=UTC)),
        _recording("recording-2", "Carmen", datetime(2023, 6, 20, tzinfo=UTC)),
        _recording("recording-3", "The Magic Flute", datetime(2023, 4, 10, tzinfo=UTC)),
    ]


@pytest.fixture
def people() -> list[dict]:
    return [
        {"id": "person-1", "name": "John Doe", "info": "Famous performer"},
        {"id": "person-2", "name": "Jane Smith", "info": "Famous performer"},
        {"id": "person-3", "name": "Wolfgang Mozart", "info": "Composer"},
    ]


@pytest.fixture
def theatres() -> list[dict]:
    return [
        {"id": "theatre-1", "name": "Royal Opera House", "city": "London", "country": "UK"},
        {"id": "theatre-2", "name": "La Scala", "city": "Milan", "country": "Italy"},
        {"id": "theatre-3", "name": "Royal Albert Hall", "city": "London", "country": "UK"},
    ]
