"""Repository for person operations."""

from __future__ import annotations

from stagevault.cache import query_cache
from stagevault.models.person import CreatePersonRequest, Person, UpdatePersonRequest
from stagevault.repos.base import DocumentRepo


class PersonRepo(DocumentRepo[Person]):
    """All person-related store operations."""

    collection = "people"
    model = Person

    async def create(self, req: CreatePersonRequest) -> Person:
        """
        Create a person.

        The new person is appended to the cached list straight away, then the
        list is refetched from the store.

        Args:
            req: Name and optional info

        Returns:
            Newly created Person
        """
        person = await self._insert(req.model_dump(by_alias=True), invalidate=False)
        key = (self.collection,)
        if key in query_cache:
            query_cache.set_query_data(key, lambda people: [*people, person])
        await query_cache.refetch(key, self._load_all)
        return person

    async def update(self, person_id: str, req: UpdatePersonRequest) -> Person | None:
        return await self._merge(person_id, req.model_dump(by_alias=True, exclude_unset=True, exclude_none=True))
