"""Admin recording routes: CRUD, edit form, image uploads and dashboard."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile

from stagevault.auth import require_editor
from stagevault.config import settings
from stagevault.exceptions import NotFound, ValidationFailed
from stagevault.kernel.types import SortOrder
from stagevault.kernel.view import compose_view
from stagevault.models.base import ListResponse, MessageResponse
from stagevault.models.person import CreatePersonRequest, Person
from stagevault.models.recording import (
    CatalogSummary,
    RecordingForm,
    RecordingResponse,
    SaveRecordingRequest,
)
from stagevault.models.storage import StoragePath, UploadBatchResponse, UploadProgress
from stagevault.models.user import CurrentUser
from stagevault.repos.person_repo import PersonRepo
from stagevault.repos.recording_repo import RecordingRepo
from stagevault.repos.theatre_repo import TheatreRepo
from stagevault.services.catalog import recording_service
from stagevault.services.storage import ImageFile, blob_storage, validate_image_file

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])
recording_repo = RecordingRepo()
person_repo = PersonRepo()
theatre_repo = TheatreRepo()


@router.get("/summary", status_code=200)
async def summary(user: CurrentUser = Depends(require_editor)) -> CatalogSummary:
    """Dashboard counts for the admin landing page."""
    return CatalogSummary(
        display_name=user.display_name or "User",
        recordings=len(await recording_repo.list()),
        people=len(await person_repo.list()),
        theatres=len(await theatre_repo.list()),
    )


@router.get("/recordings", status_code=200)
async def list_recordings(
    q: str = "",
    sort: str = "title",
    order: SortOrder = "asc",
    page: int = 1,
    page_size: int = Query(default=settings.ADMIN_PAGE_SIZE, ge=1, le=100),
    user: CurrentUser = Depends(require_editor),
) -> ListResponse[RecordingResponse]:
    """Admin table of recordings. Search covers title, theatre name and city."""
    view = compose_view(
        await recording_repo.list(),
        "recordings",
        query=q,
        scope="admin",
        sort_field=sort,
        sort_order=order,
        page=page,
        page_size=page_size,
    )
    return ListResponse[RecordingResponse].from_view(view, RecordingResponse.from_model)


@router.post("/recordings", status_code=201)
async def create_recording(
    req: SaveRecordingRequest,
    user: CurrentUser = Depends(require_editor),
) -> RecordingResponse:
    """Create a recording. People and theatre are resolved from the selected IDs."""
    recording = await recording_service.save(req)
    return RecordingResponse.from_model(recording)


@router.post("/recordings/people", status_code=201)
async def create_person_inline(
    req: CreatePersonRequest,
    user: CurrentUser = Depends(require_editor),
) -> Person:
    """Create a person from the recording editor without leaving it."""
    return await recording_service.create_person_inline(req.name, req.info)


@router.get("/recordings/{recording_id}", status_code=200)
async def get_recording(
    recording_id: str,
    user: CurrentUser = Depends(require_editor),
) -> RecordingResponse:
    """Get a single recording document."""
    recording = await recording_repo.get(recording_id)
    if not recording:
        raise NotFound("recordings", recording_id)
    return RecordingResponse.from_model(recording)


@router.get("/recordings/{recording_id}/form", status_code=200)
async def get_recording_form(
    recording_id: str,
    user: CurrentUser = Depends(require_editor),
) -> RecordingForm:
    """Values to pre-fill the edit form, including legacy reference-only documents."""
    recording = await recording_repo.get(recording_id)
    if not recording:
        raise NotFound("recordings", recording_id)
    return recording_service.form_values(recording)


@router.put("/recordings/{recording_id}", status_code=200)
async def update_recording(
    recording_id: str,
    req: SaveRecordingRequest,
    user: CurrentUser = Depends(require_editor),
) -> RecordingResponse:
    """Save the edit form over an existing recording."""
    recording = await recording_service.save(req, recording_id)
    return RecordingResponse.from_model(recording)


@router.delete("/recordings/{recording_id}", status_code=200)
async def delete_recording(
    recording_id: str,
    user: CurrentUser = Depends(require_editor),
) -> MessageResponse:
    """Delete a recording. Its uploaded images are left in storage."""
    deleted = await recording_repo.delete(recording_id)
    if not deleted:
        raise NotFound("recordings", recording_id)
    return MessageResponse(message="Recording deleted.")


@router.post("/recordings/{recording_id}/images", status_code=200)
async def upload_images(
    recording_id: str,
    files: list[UploadFile] = File(...),
    path: StoragePath = "gallery",
    user: CurrentUser = Depends(require_editor),
) -> UploadBatchResponse:
    """
    Upload images for a recording.

    "main" takes exactly one file. "gallery" takes up to IMAGE_MAX_FILES in
    total, counting images already on the recording. Invalid files are
    reported per file; the rest still upload. recording_id need not exist
    yet, so images can be uploaded before a new recording is first saved.
    """
    if path == "main" and len(files) > 1:
        raise ValidationFailed("Only one image can be uploaded")

    if path == "gallery":
        existing = await recording_repo.get(recording_id)
        current = len(existing.gallery_images or []) if existing else 0
        if current + len(files) > settings.IMAGE_MAX_FILES:
            raise ValidationFailed(f"Maximum {settings.IMAGE_MAX_FILES} images allowed")

    results: list[UploadProgress | None] = [None] * len(files)
    valid: list[tuple[int, ImageFile]] = []
    errors: list[str] = []
    for index, upload in enumerate(files):
        data = await upload.read()
        filename = upload.filename or "image"
        content_type = upload.content_type or ""
        error = validate_image_file(content_type, len(data))
        if error:
            errors.append(f"{filename}: {error}")
            results[index] = UploadProgress(filename=filename, status="error", error=error)
        else:
            valid.append((index, ImageFile(filename=filename, content_type=content_type, data=data)))

    if not valid:
        raise ValidationFailed("; ".join(errors))

    def log_progress(index: int, progress: UploadProgress) -> None:
        logger.debug("%s: %s %.0f%%", progress.filename, progress.status, progress.progress)

    uploaded = await blob_storage.upload_many(
        [image for _, image in valid],
        recording_id,
        path,
        on_progress=log_progress,
    )
    for (index, _), progress in zip(valid, uploaded, strict=True):
        results[index] = progress

    uploads = [r for r in results if r is not None]
    urls = [u.url for u in uploads if u.status == "success" and u.url]
    logger.info("uploaded %d of %d images for recording %s", len(urls), len(files), recording_id)
    return UploadBatchResponse(uploads=uploads, urls=urls)


@router.delete("/images", status_code=200)
async def delete_image(
    url: str,
    user: CurrentUser = Depends(require_editor),
) -> MessageResponse:
    """
    Delete an uploaded image by URL. External URLs are accepted and left
    alone, so the client can drop any image link the same way.
    """
    removed = await blob_storage.delete(url)
    return MessageResponse(message="Image deleted." if removed else "External image left in place.")
