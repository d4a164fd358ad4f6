"""
StageVault Kernel — Shared Types

Small data classes and record accessors shared by the sort, filter,
pagination and denormalization modules. Records are either plain mappings
(documents as they come out of the store) or attribute objects such as the
pydantic models in stagevault.models.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

T = TypeVar("T")

SortOrder = Literal["asc", "desc"]

SORT_ORDERS: set[str] = {"asc", "desc"}

DEFAULT_PAGE_SIZE = 25


class _Unset:
    """Marker for a field that must not be written at all."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


# ---------------------------------------------------------------------------
# Record access
# ---------------------------------------------------------------------------


def field_value(record: Any, key: str) -> Any:
    """
    Read a field from a record by key.

    Mappings are read with .get(). Objects are read by attribute name first,
    then by pydantic field alias, so "recordingDate" resolves to
    Recording.recording_date. Missing fields read as None.
    """
    if isinstance(record, Mapping):
        return record.get(key)
    if hasattr(record, key):
        return getattr(record, key)
    fields = getattr(type(record), "model_fields", None) or {}
    for name, info in fields.items():
        if getattr(info, "alias", None) == key:
            return getattr(record, name, None)
    extra = getattr(record, "model_extra", None) or {}
    return extra.get(key)


def has_field(record: Any, key: str) -> bool:
    """True if the record carries the key at all (even with a None value)."""
    if isinstance(record, Mapping):
        return key in record
    if hasattr(record, key):
        return True
    fields = getattr(type(record), "model_fields", None) or {}
    return any(getattr(info, "alias", None) == key for info in fields.values())


# ---------------------------------------------------------------------------
# Page containers
# ---------------------------------------------------------------------------


@dataclass
class Page(Generic[T]):
    """One offset page of an ordered sequence."""

    items: list[T]
    current_page: int
    total_pages: int
    total_items: int
    page_size: int

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.current_page > 1


@dataclass
class PageResult(Generic[T]):
    """
    One cursor page from the store.

    `cursor` is opaque: pass it back to fetch the page after this one.
    It is None when the page is empty.
    """

    items: list[T] = field(default_factory=list)
    cursor: str | None = None
    has_more: bool = False


@dataclass
class ViewResult(Generic[T]):
    """Filtered, sorted and paginated slice of a collection."""

    items: list[T]
    current_page: int
    total_pages: int
    total_items: int
    page_size: int
    sort_field: str
    sort_order: SortOrder
    query: str = ""
