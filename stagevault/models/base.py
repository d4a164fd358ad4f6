"""Shared model configuration.

Stored documents use camelCase field names. Models expose snake_case
attributes and read/write the camelCase aliases.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

from stagevault.kernel.types import ViewResult

T = TypeVar("T")

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
OptionalText = Annotated[str, StringConstraints(strip_whitespace=True, max_length=10000)]


class DocumentModel(BaseModel):
    """Base for models that map onto stored documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(BaseModel):
    """Base for what clients send. Unknown fields are rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class ListResponse(DocumentModel, Generic[T]):
    """One page of a filtered, sorted collection view."""

    items: list[T]
    page: int
    total_pages: int
    total_items: int
    page_size: int
    sort: str
    order: str
    q: str = ""

    @classmethod
    def from_view(cls, view: ViewResult[Any], convert: Callable[[Any], T] | None = None) -> ListResponse[T]:
        """Wrap a composed view, converting each item for the response."""
        items = [convert(item) for item in view.items] if convert else list(view.items)
        return cls(
            items=items,
            page=view.current_page,
            total_pages=view.total_pages,
            total_items=view.total_items,
            page_size=view.page_size,
            sort=view.sort_field,
            order=view.sort_order,
            q=view.query,
        )


class FeedResponse(DocumentModel, Generic[T]):
    """One cursor page of the infinite feed."""

    items: list[T]
    cursor: str | None = None
    has_more: bool = False


class MessageResponse(BaseModel):
    message: str
