"""Person models.

A Person has no role field: whether they are an artist, composer or
lyricist depends on which relation of a Recording points at them.
"""

from __future__ import annotations

from datetime import datetime

from stagevault.models.base import DocumentModel, OptionalText, RequestModel, RequiredText


class Person(DocumentModel):
    """Core person model. Represents a document in the people collection."""

    id: str
    name: str = ""
    info: str = ""
    date_added: datetime | None = None
    date_updated: datetime | None = None


class CreatePersonRequest(RequestModel):
    """What the client sends to create a person."""

    name: RequiredText
    info: OptionalText = ""


class UpdatePersonRequest(RequestModel):
    """What the client sends to update a person. All fields optional."""

    name: RequiredText | None = None
    info: OptionalText | None = None
