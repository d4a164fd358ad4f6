"""
Authentication and authorization for StageVault.

Sign-in happens at an external identity provider. We verify its ID token,
turn the claims into a Principal, and look up the role assigned to that
email in the users collection.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
from fastapi import Cookie, Depends, Header

from stagevault import config
from stagevault.exceptions import UnauthorizedAccess
from stagevault.models.user import CurrentUser, Principal, Role
from stagevault.repos.user_repo import UserRepo

user_repo = UserRepo()

_jwks_clients: dict[str, jwt.PyJWKClient] = {}


def _jwks_client(url: str) -> jwt.PyJWKClient:
    client = _jwks_clients.get(url)
    if client is None:
        client = jwt.PyJWKClient(url)
        _jwks_clients[url] = client
    return client


async def _verification_key(token: str):
    settings = config.settings
    if settings.IDP_JWKS_URL:
        client = _jwks_client(settings.IDP_JWKS_URL)
        # PyJWKClient fetches keys with blocking I/O
        signing_key = await asyncio.to_thread(client.get_signing_key_from_jwt, token)
        return signing_key.key
    return settings.IDP_JWT_SECRET


def create_id_token(
    uid: str,
    email: str,
    display_name: str | None = None,
    expires_in: timedelta = timedelta(hours=1),
) -> str:
    """
    Issue an HS256 ID token signed with IDP_JWT_SECRET.

    Used for local development and tests when no JWKS endpoint is configured.

    Args:
        uid: Subject identifier
        email: Email claim
        display_name: Optional name claim
        expires_in: Token lifetime

    Returns:
        Signed JWT string
    """
    settings = config.settings
    now = datetime.now(UTC)
    payload = {
        "sub": uid,
        "email": email,
        "iat": now,
        "exp": now + expires_in,
    }
    if display_name:
        payload["name"] = display_name
    if settings.IDP_AUDIENCE:
        payload["aud"] = settings.IDP_AUDIENCE
    if settings.IDP_ISSUER:
        payload["iss"] = settings.IDP_ISSUER
    return jwt.encode(payload, settings.IDP_JWT_SECRET, algorithm="HS256")


async def verify_id_token(token: str) -> dict:
    """
    Decode and verify an identity provider ID token.

    Args:
        token: JWT string

    Returns:
        Decoded claims

    Raises:
        UnauthorizedAccess: If the token is invalid or expired
    """
    settings = config.settings
    try:
        key = await _verification_key(token)
        return jwt.decode(
            token,
            key,
            algorithms=settings.IDP_ALGORITHMS,
            audience=settings.IDP_AUDIENCE or None,
            issuer=settings.IDP_ISSUER or None,
            options={"verify_aud": bool(settings.IDP_AUDIENCE)},
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedAccess("Session expired. Please sign in again.") from e
    except jwt.PyJWTError as e:
        raise UnauthorizedAccess("Invalid session token. Please sign in again.") from e


def principal_from_claims(claims: dict) -> Principal:
    uid = claims.get("sub") or claims.get("user_id")
    if not uid:
        raise UnauthorizedAccess("Invalid session token. Please sign in again.")
    return Principal(
        uid=str(uid),
        email=claims.get("email"),
        display_name=claims.get("name"),
    )


async def get_principal(
    session: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> Principal:
    """
    FastAPI dependency for the signed-in identity.

    Tries the Bearer header first, then the session cookie.

    Raises:
        UnauthorizedAccess: If no valid token is presented
    """
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization.removeprefix("Bearer ").strip()
    elif session:
        token = session

    if not token:
        raise UnauthorizedAccess("Not authenticated. Please sign in.")

    return principal_from_claims(await verify_id_token(token))


async def get_current_user(principal: Principal = Depends(get_principal)) -> CurrentUser:
    """
    FastAPI dependency for the signed-in user with their role.

    A principal whose email has no users document is treated as signed out.

    Raises:
        UnauthorizedAccess: If the principal has no role assignment
    """
    if not principal.email:
        raise UnauthorizedAccess("Your account has no email address.")

    user = await user_repo.get_by_email(principal.email)
    if user is None:
        raise UnauthorizedAccess("No access for this account. Ask an admin to add you.")

    return CurrentUser.from_principal(principal, user)


def require_role(*roles: Role) -> Callable[..., Awaitable[CurrentUser]]:
    """
    Build a dependency that admits only the given roles.

    Args:
        roles: Roles allowed through

    Returns:
        Dependency yielding the CurrentUser

    Raises:
        UnauthorizedAccess: 403 when the user's role is not allowed
    """

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise UnauthorizedAccess("You do not have permission to do that.", status_code=403)
        return user

    return dependency


require_editor = require_role("editor", "admin")
require_admin = require_role("admin")
