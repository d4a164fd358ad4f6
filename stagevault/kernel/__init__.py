"""
StageVault Kernel — the pure data view layer.

Components:
  sorting      — mixed-type, stable, non-mutating sort
  filtering    — case-insensitive substring search over scoped fields
  pagination   — offset pages and the cursor-driven infinite feed
  denormalize  — ID/ref/name snapshots for recording relations
  dates        — precision-aware recording dates
  view         — filter -> sort -> paginate composition

No IO happens here except through the fetch callable given to InfiniteFeed.
"""

from stagevault.kernel.dates import display_date, format_date_display, parse_recording_date
from stagevault.kernel.denormalize import (
    build_recording_payload,
    role_ids,
    sanitize_payload,
    theatre_id,
)
from stagevault.kernel.filtering import filter_records, matches
from stagevault.kernel.pagination import InfiniteFeed, Paginator, paginate, total_pages
from stagevault.kernel.sorting import SortState, sort_records
from stagevault.kernel.types import UNSET, Page, PageResult, ViewResult
from stagevault.kernel.view import compose_view

__all__ = [
    "UNSET",
    "Page",
    "PageResult",
    "ViewResult",
    "sort_records",
    "SortState",
    "matches",
    "filter_records",
    "paginate",
    "total_pages",
    "Paginator",
    "InfiniteFeed",
    "role_ids",
    "theatre_id",
    "build_recording_payload",
    "sanitize_payload",
    "format_date_display",
    "display_date",
    "parse_recording_date",
    "compose_view",
]
