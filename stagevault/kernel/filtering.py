"""
StageVault Kernel — Filter Engine

Boolean membership of a record for a free-text query: case-insensitive
substring match over one field, a list of fields, or a named per-entity
scope. List-valued fields match when any element matches.

No tokenization, fuzzy matching or ranking.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from stagevault.kernel.types import field_value

# Named search scopes per collection. "all" is the OR of every searchable field.
SEARCH_SCOPES: dict[str, dict[str, tuple[str, ...]]] = {
    "recordings": {
        "all": ("title", "theatreName", "city", "artistNames"),
        "title": ("title",),
        "artist": ("artistNames",),
        "theatre": ("theatreName", "city"),
        "admin": ("title", "theatreName", "city"),
    },
    "theatres": {
        "all": ("name", "city", "country"),
        "name": ("name",),
    },
    "people": {
        "all": ("name", "info"),
        "name": ("name",),
    },
    "users": {
        "all": ("email", "role"),
    },
}


def resolve_scope(collection: str, scope: str | Sequence[str]) -> tuple[str, ...]:
    """
    Turn a scope into the tuple of fields it covers.

    A string names a registered scope for the collection; an unregistered
    string is treated as a single field name. A sequence is taken as-is.
    """
    if isinstance(scope, str):
        scopes = SEARCH_SCOPES.get(collection, {})
        return scopes.get(scope, (scope,))
    return tuple(scope)


def _value_matches(value: Any, needle: str) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return needle in value.lower()
    if isinstance(value, Mapping):
        return False
    if isinstance(value, Iterable):
        return any(_value_matches(item, needle) for item in value)
    return needle in str(value).lower()


def matches(record: Any, query: str | None, scope: str | Sequence[str]) -> bool:
    """
    Decide whether a record matches a query.

    Args:
        record: Mapping or attribute object
        query: Free text; empty or whitespace-only matches everything
        scope: Field name or sequence of field names (OR across them)

    Returns:
        True if any scoped field contains the query, ignoring case
    """
    if query is None or not query.strip():
        return True
    needle = query.lower()
    fields = (scope,) if isinstance(scope, str) else tuple(scope)
    return any(_value_matches(field_value(record, f), needle) for f in fields)


def filter_records(
    records: Iterable[Any],
    query: str | None,
    scope: str | Sequence[str],
    collection: str | None = None,
) -> list[Any]:
    """Keep the records that match. Order is preserved."""
    records = list(records)
    if query is None or not query.strip():
        return records
    fields = resolve_scope(collection, scope) if collection else scope
    return [r for r in records if matches(r, query, fields)]
