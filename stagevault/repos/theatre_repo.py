"""Repository for theatre operations."""

from __future__ import annotations

from stagevault.models.theatre import CreateTheatreRequest, Theatre, UpdateTheatreRequest
from stagevault.repos.base import DocumentRepo


class TheatreRepo(DocumentRepo[Theatre]):
    """All theatre-related store operations."""

    collection = "theatres"
    model = Theatre

    async def create(self, req: CreateTheatreRequest) -> Theatre:
        return await self._insert(req.model_dump(by_alias=True))

    async def update(self, theatre_id: str, req: UpdateTheatreRequest) -> Theatre | None:
        """
        Update a theatre's fields. Recordings keep their theatreName/city
        snapshot until they are saved again.

        Args:
            theatre_id: Theatre ID
            req: Fields to change

        Returns:
            Updated Theatre, or None if not found
        """
        return await self._merge(theatre_id, req.model_dump(by_alias=True, exclude_unset=True, exclude_none=True))
