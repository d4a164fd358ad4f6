"""Public recording routes: browse, feed, detail and search."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from stagevault.auth import get_current_user
from stagevault.config import settings
from stagevault.kernel.filtering import filter_records
from stagevault.kernel.types import SortOrder
from stagevault.kernel.view import compose_view
from stagevault.models.base import FeedResponse, ListResponse
from stagevault.models.recording import RecordingDetails, RecordingResponse
from stagevault.models.user import CurrentUser
from stagevault.repos.recording_repo import RecordingRepo
from stagevault.services.catalog import recording_service

router = APIRouter(prefix="/api", tags=["recordings"])
recording_repo = RecordingRepo()

SearchType = Literal["all", "title", "artist", "theatre"]


@router.get("/recordings", status_code=200)
async def list_recordings(
    q: str = "",
    scope: SearchType = "all",
    sort: str = "dateAdded",
    order: SortOrder = "desc",
    page: int = 1,
    page_size: int = Query(default=settings.ADMIN_PAGE_SIZE, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
) -> ListResponse[RecordingResponse]:
    """Browse recordings: filter, sort and paginate the full catalogue."""
    view = compose_view(
        await recording_repo.list(),
        "recordings",
        query=q,
        scope=scope,
        sort_field=sort,
        sort_order=order,
        page=page,
        page_size=page_size,
    )
    return ListResponse[RecordingResponse].from_view(view, RecordingResponse.from_model)


@router.get("/recordings/feed", status_code=200)
async def recordings_feed(
    cursor: str | None = None,
    page_size: int = Query(default=settings.FEED_PAGE_SIZE, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
) -> FeedResponse[RecordingResponse]:
    """
    Newest-first feed for infinite scroll.

    Pass the returned cursor back to get the next page. has_more is false
    on the last page.
    """
    result = await recording_repo.feed_page(cursor, page_size)
    return FeedResponse[RecordingResponse](
        items=[RecordingResponse.from_model(r) for r in result.items],
        cursor=result.cursor,
        has_more=result.has_more,
    )


@router.get("/recordings/{recording_id}", status_code=200)
async def get_recording(
    recording_id: str,
    user: CurrentUser = Depends(get_current_user),
) -> RecordingDetails:
    """Get a recording with its theatre and people resolved."""
    return await recording_service.details(recording_id)


@router.get("/search", status_code=200)
async def search_recordings(
    q: str = "",
    type: SearchType = "all",
    user: CurrentUser = Depends(get_current_user),
) -> list[RecordingResponse]:
    """
    Search recordings by title, artist name, or theatre name and city.

    An empty query returns every recording.
    """
    matches = filter_records(await recording_repo.list(), q, type, collection="recordings")
    return [RecordingResponse.from_model(r) for r in matches]
