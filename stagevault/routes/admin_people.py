"""Admin person routes: CRUD and per-person recordings."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from stagevault.auth import require_editor
from stagevault.config import settings
from stagevault.exceptions import NotFound
from stagevault.kernel.types import SortOrder
from stagevault.kernel.view import compose_view
from stagevault.models.base import ListResponse, MessageResponse
from stagevault.models.person import CreatePersonRequest, Person, UpdatePersonRequest
from stagevault.models.recording import PersonAppearances
from stagevault.models.user import CurrentUser
from stagevault.repos.person_repo import PersonRepo
from stagevault.services.catalog import recording_service

router = APIRouter(prefix="/api/admin/people", tags=["admin"])
person_repo = PersonRepo()


@router.get("", status_code=200)
async def list_people(
    q: str = "",
    sort: str = "name",
    order: SortOrder = "asc",
    page: int = 1,
    page_size: int = Query(default=settings.ADMIN_PAGE_SIZE, ge=1, le=100),
    user: CurrentUser = Depends(require_editor),
) -> ListResponse[Person]:
    """Admin table of people. Search covers name and info."""
    view = compose_view(
        await person_repo.list(),
        "people",
        query=q,
        sort_field=sort,
        sort_order=order,
        page=page,
        page_size=page_size,
    )
    return ListResponse[Person].from_view(view)


@router.post("", status_code=201)
async def create_person(
    req: CreatePersonRequest,
    user: CurrentUser = Depends(require_editor),
) -> Person:
    """Create a person."""
    return await person_repo.create(req)


@router.get("/{person_id}", status_code=200)
async def get_person(
    person_id: str,
    user: CurrentUser = Depends(require_editor),
) -> Person:
    """Get a single person by ID."""
    person = await person_repo.get(person_id)
    if not person:
        raise NotFound("people", person_id)
    return person


@router.get("/{person_id}/recordings", status_code=200)
async def get_person_recordings(
    person_id: str,
    user: CurrentUser = Depends(require_editor),
) -> PersonAppearances:
    """Recordings this person is on, grouped by artist, composer and lyricist."""
    return await recording_service.appearances(person_id)


@router.patch("/{person_id}", status_code=200)
async def update_person(
    person_id: str,
    req: UpdatePersonRequest,
    user: CurrentUser = Depends(require_editor),
) -> Person:
    """Update a person. Recordings keep the artist names they were saved with."""
    person = await person_repo.update(person_id, req)
    if not person:
        raise NotFound("people", person_id)
    return person


@router.delete("/{person_id}", status_code=200)
async def delete_person(
    person_id: str,
    user: CurrentUser = Depends(require_editor),
) -> MessageResponse:
    """Delete a person. Recordings that reference them are not touched."""
    deleted = await person_repo.delete(person_id)
    if not deleted:
        raise NotFound("people", person_id)
    return MessageResponse(message="Person deleted.")
