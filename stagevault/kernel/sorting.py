"""
StageVault Kernel — Sort Engine

Orders heterogeneous records by a single field.

Comparison rules:
  strings     — case-insensitive
  numbers     — numeric (bools count as numbers)
  timestamps  — epoch milliseconds (datetime, date, or anything exposing
                timestamp() / to_millis())
  None        — normalized to "" and sorts lowest

Python will not compare str with int, so values are mapped onto a total
order of buckets: empty < numbers and timestamps < non-empty strings.

Sorting is stable in both directions and never mutates its input.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

from stagevault.kernel.types import SORT_ORDERS, SortOrder, field_value

_EMPTY = 0
_NUMERIC = 1
_TEXT = 2


def to_millis(value: Any) -> float | None:
    """Epoch milliseconds for timestamp-like values, None for anything else."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.timestamp() * 1000
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC).timestamp() * 1000
    for method in ("to_millis", "toMillis"):
        fn = getattr(value, method, None)
        if callable(fn):
            return float(fn())
    fn = getattr(value, "timestamp", None)
    if callable(fn) and not isinstance(value, (str, bytes)):
        return float(fn()) * 1000
    return None


def sort_key(value: Any) -> tuple[int, Any]:
    """Map one field value onto the engine's total order."""
    if value is None:
        return (_EMPTY, "")
    if isinstance(value, str):
        lowered = value.lower()
        return (_TEXT, lowered) if lowered else (_EMPTY, "")
    if isinstance(value, (bool, int, float)):
        return (_NUMERIC, float(value))
    millis = to_millis(value)
    if millis is not None:
        return (_NUMERIC, millis)
    text = str(value).lower()
    return (_TEXT, text) if text else (_EMPTY, "")


def sort_records(records: Iterable[Any], field: str, order: SortOrder = "asc") -> list[Any]:
    """
    Return a new list of records ordered by `field`.

    Args:
        records: Mappings or attribute objects
        field: Field key (attribute name or camelCase alias)
        order: "asc" or "desc"

    Returns:
        Sorted copy; ties keep their input order
    """
    if order not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order: {order!r}")
    return sorted(
        records,
        key=lambda record: sort_key(field_value(record, field)),
        reverse=order == "desc",
    )


@dataclass
class SortState:
    """
    Column-header sort state.

    Selecting the current field again flips the order; selecting another
    field switches to it in ascending order.
    """

    field: str
    order: SortOrder = "asc"

    def toggle(self, field: str) -> SortState:
        if field == self.field:
            self.order = "desc" if self.order == "asc" else "asc"
        else:
            self.field = field
            self.order = "asc"
        return self

    def apply(self, records: Iterable[Any]) -> list[Any]:
        return sort_records(records, self.field, self.order)
