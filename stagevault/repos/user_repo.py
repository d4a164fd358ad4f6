"""Repository for user role assignments."""

from __future__ import annotations

from stagevault.models.user import CreateUserRequest, UpdateUserRequest, UserData
from stagevault.repos.base import DocumentRepo


class UserRepo(DocumentRepo[UserData]):
    """All user-related store operations."""

    collection = "users"
    model = UserData

    async def get_by_email(self, email: str) -> UserData | None:
        """
        Get a user by email address. Used to resolve a signed-in principal's role.

        Args:
            email: Email address to look up, compared case-insensitively

        Returns:
            UserData if found, None otherwise
        """
        wanted = email.strip().lower()
        for user in await self.list():
            if user.email.lower() == wanted:
                return user
        return None

    async def create(self, req: CreateUserRequest) -> UserData:
        return await self._insert({"email": req.email.lower(), "role": req.role})

    async def update(self, user_id: str, req: UpdateUserRequest) -> UserData | None:
        """
        Change a user's role.

        Args:
            user_id: User ID
            req: New role

        Returns:
            Updated UserData, or None if not found
        """
        return await self._merge(user_id, {"role": req.role})
