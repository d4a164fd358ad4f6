"""
Recording catalogue service.

Joins recordings with the people and theatres they point at. Writes go
through build_recording_payload() so the ID lists, legacy refs and display
snapshots stay in step. Multi-document work is a plain sequence of awaits:
if a later step fails, earlier writes stay.
"""

from __future__ import annotations

import logging
from typing import Any

from stagevault.exceptions import NotFound
from stagevault.kernel.dates import date_form_value, parse_recording_date
from stagevault.kernel.denormalize import ROLES, build_recording_payload, role_ids
from stagevault.kernel.denormalize import theatre_id as theatre_of
from stagevault.kernel.sorting import sort_records
from stagevault.kernel.types import UNSET
from stagevault.models.person import CreatePersonRequest, Person
from stagevault.models.recording import (
    PersonAppearances,
    Recording,
    RecordingDetails,
    RecordingForm,
    RecordingResponse,
    SaveRecordingRequest,
    TheatreRecordings,
)
from stagevault.repos.person_repo import PersonRepo
from stagevault.repos.recording_repo import RecordingRepo
from stagevault.repos.theatre_repo import TheatreRepo

logger = logging.getLogger(__name__)


class RecordingService:
    """Reads and writes that span recordings, people and theatres."""

    def __init__(self) -> None:
        self.recordings = RecordingRepo()
        self.people = PersonRepo()
        self.theatres = TheatreRepo()

    async def save(self, req: SaveRecordingRequest, recording_id: str | None = None) -> Recording:
        """
        Create a recording, or replace the editable fields of an existing one.

        Args:
            req: Submitted form values
            recording_id: None to create, otherwise the recording to update

        Returns:
            Saved Recording

        Raises:
            NotFound: If recording_id does not exist
        """
        recording_date, release_year = parse_recording_date(req.recording_date, req.date_precision)
        is_new = recording_id is None

        fields: dict[str, Any] = {
            "title": req.title,
            "imageUrl": req.image_url,
            "info": req.info,
            "oneDriveLink": req.one_drive_link,
            # An empty gallery is left off new documents but cleared on edits
            "galleryImages": req.gallery_images or (UNSET if is_new else []),
            "releaseYear": release_year,
            "recordingDate": recording_date,
            "datePrecision": req.date_precision,
        }
        payload = build_recording_payload(
            fields,
            req.selected_people(),
            req.theatre_id,
            await self.people.list(),
            await self.theatres.list(),
        )

        if is_new:
            return await self.recordings.create(payload)
        recording = await self.recordings.update(recording_id, payload)
        if recording is None:
            raise NotFound("recordings", recording_id)
        return recording

    async def details(self, recording_id: str) -> RecordingDetails:
        """
        Resolve a recording's theatre and people for the detail view.

        References that no longer resolve are skipped.

        Args:
            recording_id: Recording ID

        Returns:
            RecordingDetails

        Raises:
            NotFound: If the recording does not exist
        """
        recording = await self.recordings.get(recording_id)
        if recording is None:
            raise NotFound("recordings", recording_id)

        theatre = None
        tid = theatre_of(recording)
        if tid:
            theatre = await self.theatres.get(tid)

        resolved: dict[str, list[Person]] = {}
        for role in ROLES:
            resolved[role] = await self.people.get_many(role_ids(recording, role))

        return RecordingDetails(
            recording=RecordingResponse.from_model(recording),
            theatre=theatre,
            artists=resolved["artist"],
            composers=resolved["composer"],
            lyricists=resolved["lyricist"],
        )

    async def appearances(self, person_id: str) -> PersonAppearances:
        """
        Recordings a person is on, grouped by role and sorted by title.

        Args:
            person_id: Person ID

        Returns:
            PersonAppearances

        Raises:
            NotFound: If the person does not exist
        """
        person = await self.people.get(person_id)
        if person is None:
            raise NotFound("people", person_id)

        recordings = sort_records(await self.recordings.list(), "title")
        grouped: dict[str, list[RecordingResponse]] = {role: [] for role in ROLES}
        for recording in recordings:
            for role in ROLES:
                if person_id in role_ids(recording, role):
                    grouped[role].append(RecordingResponse.from_model(recording))
        return PersonAppearances(person=person, **grouped)

    async def recordings_at(self, theatre_id: str) -> TheatreRecordings:
        """
        Recordings made at a theatre, newest recording date first.

        Args:
            theatre_id: Theatre ID

        Returns:
            TheatreRecordings

        Raises:
            NotFound: If the theatre does not exist
        """
        theatre = await self.theatres.get(theatre_id)
        if theatre is None:
            raise NotFound("theatres", theatre_id)
        matching = [r for r in await self.recordings.list() if theatre_of(r) == theatre_id]
        return TheatreRecordings(
            theatre=theatre,
            recordings=[RecordingResponse.from_model(r) for r in sort_records(matching, "recordingDate", "desc")],
        )

    @staticmethod
    def form_values(recording: Recording) -> RecordingForm:
        """Pre-fill values for the edit form, reading legacy refs where needed."""
        precision = recording.date_precision or "full"
        return RecordingForm(
            title=recording.title,
            image_url=recording.image_url or "",
            info=recording.info or "",
            one_drive_link=recording.one_drive_link or "",
            gallery_images=recording.gallery_images or [],
            recording_date=date_form_value(recording.recording_date, precision),
            date_precision=precision,
            theatre_id=theatre_of(recording),
            artist_ids=role_ids(recording, "artist"),
            composer_ids=role_ids(recording, "composer"),
            lyricist_ids=role_ids(recording, "lyricist"),
        )

    async def create_person_inline(self, name: str, info: str = "") -> Person:
        """
        Create a person from the recording editor's autocomplete.

        The person is written on its own; nothing is undone if the recording
        save that follows fails.
        """
        person = await self.people.create(CreatePersonRequest(name=name, info=info))
        logger.info("created person %s inline", person.id)
        return person


# Singleton instance
recording_service = RecordingService()
