"""Admin user routes: who may sign in, and with which role."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stagevault.auth import require_admin, require_editor
from stagevault.config import settings
from stagevault.exceptions import NotFound
from stagevault.kernel.types import SortOrder
from stagevault.kernel.view import compose_view
from stagevault.models.base import ListResponse, MessageResponse
from stagevault.models.user import CreateUserRequest, CurrentUser, UpdateUserRequest, UserData
from stagevault.repos.user_repo import UserRepo

router = APIRouter(prefix="/api/admin/users", tags=["admin"])
user_repo = UserRepo()


@router.get("", status_code=200)
async def list_users(
    q: str = "",
    sort: str = "email",
    order: SortOrder = "asc",
    page: int = 1,
    page_size: int = Query(default=settings.ADMIN_PAGE_SIZE, ge=1, le=100),
    user: CurrentUser = Depends(require_editor),
) -> ListResponse[UserData]:
    """List role assignments. Editors can view; only admins can change them."""
    view = compose_view(
        await user_repo.list(),
        "users",
        query=q,
        sort_field=sort,
        sort_order=order,
        page=page,
        page_size=page_size,
    )
    return ListResponse[UserData].from_view(view)


@router.post("", status_code=201)
async def create_user(
    req: CreateUserRequest,
    user: CurrentUser = Depends(require_admin),
) -> UserData:
    """Grant an email address access with a role."""
    if await user_repo.get_by_email(req.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A user with that email already exists.")
    return await user_repo.create(req)


@router.patch("/{user_id}", status_code=200)
async def update_user(
    user_id: str,
    req: UpdateUserRequest,
    user: CurrentUser = Depends(require_admin),
) -> UserData:
    """Change a user's role."""
    updated = await user_repo.update(user_id, req)
    if not updated:
        raise NotFound("users", user_id)
    return updated


@router.delete("/{user_id}", status_code=200)
async def delete_user(
    user_id: str,
    user: CurrentUser = Depends(require_admin),
) -> MessageResponse:
    """Revoke a user's access."""
    if user_id == user.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot remove your own access.")
    deleted = await user_repo.delete(user_id)
    if not deleted:
        raise NotFound("users", user_id)
    return MessageResponse(message="User deleted.")
