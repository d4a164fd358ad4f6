"""
StageVault Kernel — View Composition

Filter -> Sort -> Paginate over a collection snapshot, the way a table or
grid is built for display.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from stagevault.kernel.filtering import filter_records
from stagevault.kernel.pagination import paginate
from stagevault.kernel.sorting import sort_records
from stagevault.kernel.types import DEFAULT_PAGE_SIZE, SortOrder, ViewResult


def compose_view(
    records: Iterable[Any],
    collection: str,
    query: str | None = "",
    scope: str | Sequence[str] = "all",
    sort_field: str = "title",
    sort_order: SortOrder = "asc",
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ViewResult[Any]:
    """
    Build one page of a collection view.

    Args:
        records: Full collection snapshot
        collection: Collection name, used to resolve named search scopes
        query: Free-text search, empty for none
        scope: Named scope ("all", "title", ...) or explicit field list
        sort_field: Field key to order by
        sort_order: "asc" or "desc"
        page: Requested 1-based page, clamped into range
        page_size: Items per page

    Returns:
        ViewResult with the page's items and paging metadata
    """
    filtered = filter_records(records, query, scope, collection=collection)
    ordered = sort_records(filtered, sort_field, sort_order)
    result = paginate(ordered, page, page_size)
    return ViewResult(
        items=result.items,
        current_page=result.current_page,
        total_pages=result.total_pages,
        total_items=result.total_items,
        page_size=result.page_size,
        sort_field=sort_field,
        sort_order=sort_order,
        query=query or "",
    )
