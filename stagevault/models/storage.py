"""Image upload models."""

from __future__ import annotations

from typing import Literal

from stagevault.models.base import DocumentModel

StoragePath = Literal["main", "gallery"]

UploadStatus = Literal["uploading", "success", "error"]


class UploadProgress(DocumentModel):
    """Progress and outcome of one file in an upload batch."""

    filename: str
    progress: float = 0.0
    status: UploadStatus = "uploading"
    url: str | None = None
    error: str | None = None


class UploadBatchResponse(DocumentModel):
    """Per-file results plus the URLs that made it, in upload order."""

    uploads: list[UploadProgress]
    urls: list[str]
