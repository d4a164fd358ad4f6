"""
Pydantic models for StageVault.

All data shapes defined here. No imports from db, repos, or routes.
"""

from stagevault.models.base import FeedResponse, ListResponse, MessageResponse
from stagevault.models.person import CreatePersonRequest, Person, UpdatePersonRequest
from stagevault.models.recording import (
    CatalogSummary,
    PersonAppearances,
    Recording,
    RecordingDetails,
    RecordingForm,
    RecordingResponse,
    SaveRecordingRequest,
    TheatreRecordings,
)
from stagevault.models.storage import UploadBatchResponse, UploadProgress
from stagevault.models.theatre import CreateTheatreRequest, Theatre, UpdateTheatreRequest
from stagevault.models.user import CreateUserRequest, CurrentUser, Principal, UpdateUserRequest, UserData

__all__ = [
    # Shared
    "ListResponse",
    "FeedResponse",
    "MessageResponse",
    # Theatre models
    "Theatre",
    "CreateTheatreRequest",
    "UpdateTheatreRequest",
    # Person models
    "Person",
    "CreatePersonRequest",
    "UpdatePersonRequest",
    # Recording models
    "Recording",
    "RecordingResponse",
    "RecordingDetails",
    "RecordingForm",
    "SaveRecordingRequest",
    "PersonAppearances",
    "TheatreRecordings",
    "CatalogSummary",
    # User models
    "UserData",
    "CreateUserRequest",
    "UpdateUserRequest",
    "Principal",
    "CurrentUser",
    # Upload models
    "UploadProgress",
    "UploadBatchResponse",
]
