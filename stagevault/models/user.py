"""User models for authentication and authorization."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, field_validator

from stagevault.models.base import DocumentModel, RequestModel

Role = Literal["viewer", "editor", "admin"]

ROLES: tuple[str, ...] = ("viewer", "editor", "admin")


class UserData(DocumentModel):
    """Role assignment. Represents a document in the users collection."""

    id: str
    email: str
    role: Role = "viewer"
    date_added: datetime | None = None


class CreateUserRequest(RequestModel):
    """What an admin sends to grant access to an email address."""

    email: EmailStr
    role: Role = "viewer"

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class UpdateUserRequest(RequestModel):
    """What an admin sends to change a user's role."""

    role: Role


@dataclass(frozen=True)
class Principal:
    """Signed-in identity as delivered by the identity provider."""

    uid: str
    email: str | None
    display_name: str | None = None


class CurrentUser(BaseModel):
    """Principal joined with its role. What route dependencies receive."""

    uid: str
    email: str
    display_name: str | None = None
    role: Role
    user_id: str

    @classmethod
    def from_principal(cls, principal: Principal, user: UserData) -> CurrentUser:
        return cls(
            uid=principal.uid,
            email=user.email,
            display_name=principal.display_name,
            role=user.role,
            user_id=user.id,
        )
