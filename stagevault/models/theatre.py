"""Theatre models."""

from __future__ import annotations

from datetime import datetime

from stagevault.models.base import DocumentModel, RequestModel, RequiredText


class Theatre(DocumentModel):
    """Core theatre model. Represents a document in the theatres collection."""

    id: str
    name: str = ""
    city: str = ""
    country: str = ""
    date_added: datetime | None = None
    date_updated: datetime | None = None


class CreateTheatreRequest(RequestModel):
    """What the client sends to create a theatre. All three fields required."""

    name: RequiredText
    city: RequiredText
    country: RequiredText


class UpdateTheatreRequest(RequestModel):
    """What the client sends to update a theatre. All fields optional."""

    name: RequiredText | None = None
    city: RequiredText | None = None
    country: RequiredText | None = None
