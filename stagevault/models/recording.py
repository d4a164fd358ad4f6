"""Recording models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from stagevault.kernel.dates import display_date, is_valid_date_input
from stagevault.models.base import DocumentModel, OptionalText, RequestModel, RequiredText
from stagevault.models.person import Person
from stagevault.models.theatre import Theatre

DatePrecision = Literal["year", "full"]


class Recording(DocumentModel):
    """
    Core recording model. Represents a document in the recordings collection.

    Relation fields are optional because older documents carry only the
    *Refs lists. Read role membership through kernel.denormalize.role_ids().
    """

    id: str
    title: str = ""
    image_url: str | None = None
    info: str | None = None
    one_drive_link: str | None = None
    gallery_images: list[str] | None = None
    release_year: int | None = None
    recording_date: datetime | None = None
    date_precision: DatePrecision | None = None

    theatre_id: str | None = None
    theatre_ref: Any = None
    theatre_name: str | None = None
    city: str | None = None

    artist_ids: list[str] | None = None
    artist_refs: list[Any] | None = None
    artist_names: list[str] | None = None
    composer_ids: list[str] | None = None
    composer_refs: list[Any] | None = None
    lyricist_ids: list[str] | None = None
    lyricist_refs: list[Any] | None = None

    date_added: datetime | None = None
    date_updated: datetime | None = None


class RecordingResponse(Recording):
    """What the API returns for a recording: the document plus its display date."""

    display_date: str = ""

    @classmethod
    def from_model(cls, recording: Recording) -> RecordingResponse:
        """Convert internal Recording model to API response."""
        return cls(**recording.model_dump(), display_date=display_date(recording))


class RecordingDetails(DocumentModel):
    """A recording with its theatre and people resolved. Dangling references are left out."""

    recording: RecordingResponse
    theatre: Theatre | None = None
    artists: list[Person] = Field(default_factory=list)
    composers: list[Person] = Field(default_factory=list)
    lyricists: list[Person] = Field(default_factory=list)


class RecordingForm(DocumentModel):
    """Edit-form values for an existing recording."""

    title: str = ""
    image_url: str = ""
    info: str = ""
    one_drive_link: str = ""
    gallery_images: list[str] = Field(default_factory=list)
    recording_date: str = ""
    date_precision: DatePrecision = "full"
    theatre_id: str | None = None
    artist_ids: list[str] = Field(default_factory=list)
    composer_ids: list[str] = Field(default_factory=list)
    lyricist_ids: list[str] = Field(default_factory=list)


class SaveRecordingRequest(RequestModel):
    """
    What the admin form submits to create or replace a recording.

    recording_date is "YYYY" for year precision and "YYYY-MM-DD" otherwise.
    Left empty, the recording is dated now.
    """

    title: RequiredText
    image_url: OptionalText = ""
    info: OptionalText = ""
    one_drive_link: OptionalText = ""
    gallery_images: list[str] = Field(default_factory=list)
    recording_date: str = ""
    date_precision: DatePrecision = "full"
    theatre_id: str | None = None
    artist_ids: list[str] = Field(default_factory=list)
    composer_ids: list[str] = Field(default_factory=list)
    lyricist_ids: list[str] = Field(default_factory=list)

    @field_validator("gallery_images", mode="before")
    @classmethod
    def split_gallery_lines(cls, value: Any) -> Any:
        """Accept one URL per line as well as a list; blanks are dropped."""
        if isinstance(value, str):
            value = value.split("\n")
        if isinstance(value, list):
            return [str(url).strip() for url in value if str(url).strip()]
        return value

    @model_validator(mode="after")
    def check_recording_date(self) -> SaveRecordingRequest:
        self.recording_date = self.recording_date.strip()
        if self.recording_date and not is_valid_date_input(self.recording_date, self.date_precision):
            expected = "YYYY" if self.date_precision == "year" else "YYYY-MM-DD"
            raise ValueError(f"recordingDate must be {expected} for {self.date_precision} precision")
        return self

    def selected_people(self) -> dict[str, list[str]]:
        return {
            "artist": self.artist_ids,
            "composer": self.composer_ids,
            "lyricist": self.lyricist_ids,
        }


class PersonAppearances(DocumentModel):
    """Recordings a person appears on, grouped by role."""

    person: Person
    artist: list[RecordingResponse] = Field(default_factory=list)
    composer: list[RecordingResponse] = Field(default_factory=list)
    lyricist: list[RecordingResponse] = Field(default_factory=list)


class TheatreRecordings(DocumentModel):
    """Recordings made at one theatre."""

    theatre: Theatre
    recordings: list[RecordingResponse] = Field(default_factory=list)


class CatalogSummary(DocumentModel):
    """Admin dashboard: who is signed in and how big the catalogue is."""

    display_name: str
    recordings: int
    people: int
    theatres: int
