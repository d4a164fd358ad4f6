"""Authentication routes: session cookie and current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from stagevault.auth import get_current_user, principal_from_claims, user_repo, verify_id_token
from stagevault.exceptions import UnauthorizedAccess
from stagevault.models.base import MessageResponse, RequestModel
from stagevault.models.user import CurrentUser

router = APIRouter(prefix="/auth", tags=["auth"])

SESSION_MAX_AGE = 3600


class SessionRequest(RequestModel):
    id_token: str


@router.post("/session", status_code=200)
async def create_session(req: SessionRequest, response: Response) -> CurrentUser:
    """
    Exchange an identity provider ID token for a session cookie.

    Only emails with a role assignment get a session.
    """
    principal = principal_from_claims(await verify_id_token(req.id_token))
    user = await user_repo.get_by_email(principal.email or "")
    if user is None:
        raise UnauthorizedAccess("No access for this account. Ask an admin to add you.")

    response.set_cookie(
        key="session",
        value=req.id_token,
        httponly=True,
        secure=True,
        samesite="lax",
        max_age=SESSION_MAX_AGE,
        path="/",
    )
    return CurrentUser.from_principal(principal, user)


@router.get("/me", status_code=200)
async def get_current_user_endpoint(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Get the signed-in user and their role."""
    return user


@router.post("/logout", status_code=200)
async def logout_endpoint(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    response.set_cookie(
        key="session",
        value="",
        httponly=True,
        secure=True,
        samesite="lax",
        max_age=0,
        path="/",
    )
    return MessageResponse(message="Signed out.")
