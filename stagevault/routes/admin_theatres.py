"""Admin theatre routes: CRUD and per-theatre recordings."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from stagevault.auth import require_editor
from stagevault.config import settings
from stagevault.exceptions import NotFound
from stagevault.kernel.types import SortOrder
from stagevault.kernel.view import compose_view
from stagevault.models.base import ListResponse, MessageResponse
from stagevault.models.recording import TheatreRecordings
from stagevault.models.theatre import CreateTheatreRequest, Theatre, UpdateTheatreRequest
from stagevault.models.user import CurrentUser
from stagevault.repos.theatre_repo import TheatreRepo
from stagevault.services.catalog import recording_service

router = APIRouter(prefix="/api/admin/theatres", tags=["admin"])
theatre_repo = TheatreRepo()


@router.get("", status_code=200)
async def list_theatres(
    q: str = "",
    sort: str = "name",
    order: SortOrder = "asc",
    page: int = 1,
    page_size: int = Query(default=settings.ADMIN_PAGE_SIZE, ge=1, le=100),
    user: CurrentUser = Depends(require_editor),
) -> ListResponse[Theatre]:
    """Admin table of theatres. Search covers name, city and country."""
    view = compose_view(
        await theatre_repo.list(),
        "theatres",
        query=q,
        sort_field=sort,
        sort_order=order,
        page=page,
        page_size=page_size,
    )
    return ListResponse[Theatre].from_view(view)


@router.post("", status_code=201)
async def create_theatre(
    req: CreateTheatreRequest,
    user: CurrentUser = Depends(require_editor),
) -> Theatre:
    """Create a theatre. Name, city and country are all required."""
    return await theatre_repo.create(req)


@router.get("/{theatre_id}", status_code=200)
async def get_theatre(
    theatre_id: str,
    user: CurrentUser = Depends(require_editor),
) -> Theatre:
    """Get a single theatre by ID."""
    theatre = await theatre_repo.get(theatre_id)
    if not theatre:
        raise NotFound("theatres", theatre_id)
    return theatre


@router.get("/{theatre_id}/recordings", status_code=200)
async def get_theatre_recordings(
    theatre_id: str,
    user: CurrentUser = Depends(require_editor),
) -> TheatreRecordings:
    """Recordings made at this theatre, newest first."""
    return await recording_service.recordings_at(theatre_id)


@router.patch("/{theatre_id}", status_code=200)
async def update_theatre(
    theatre_id: str,
    req: UpdateTheatreRequest,
    user: CurrentUser = Depends(require_editor),
) -> Theatre:
    """Update a theatre. Recordings keep the theatre name and city they were saved with."""
    theatre = await theatre_repo.update(theatre_id, req)
    if not theatre:
        raise NotFound("theatres", theatre_id)
    return theatre


@router.delete("/{theatre_id}", status_code=200)
async def delete_theatre(
    theatre_id: str,
    user: CurrentUser = Depends(require_editor),
) -> MessageResponse:
    """Delete a theatre. Recordings that reference it are not touched."""
    deleted = await theatre_repo.delete(theatre_id)
    if not deleted:
        raise NotFound("theatres", theatre_id)
    return MessageResponse(message="Theatre deleted.")
