"""
StageVault Kernel — Denormalization Manager

Recordings store each relation twice:

  <role>Ids   — flat list of Person IDs, the source of truth going forward
  <role>Refs  — parallel list of reference handles ("people/<id>"), kept for
                documents written before the ID lists existed

plus display snapshots frozen at write time: artistNames for the artist
role, theatreName/city for the theatre. A later rename of a Person or
Theatre does not touch recordings until they are saved again.

Reads must go through role_ids() / theatre_id() so that legacy documents
holding only reference lists keep their associations.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Literal

from stagevault.kernel.types import UNSET, field_value, has_field

Role = Literal["artist", "composer", "lyricist"]

ROLES: tuple[Role, ...] = ("artist", "composer", "lyricist")

PEOPLE = "people"
THEATRES = "theatres"


# ---------------------------------------------------------------------------
# Reference handles
# ---------------------------------------------------------------------------


def make_ref(collection: str, doc_id: str) -> str:
    return f"{collection}/{doc_id}"


def ref_id(ref: Any) -> str | None:
    """
    Extract the document ID from a reference handle.

    Accepts "people/<id>" strings, mappings with "id" or "path", and objects
    exposing an `id` attribute.
    """
    if ref is None:
        return None
    if isinstance(ref, str):
        return ref.rstrip("/").rsplit("/", 1)[-1] or None
    if isinstance(ref, Mapping):
        if ref.get("id"):
            return str(ref["id"])
        if ref.get("path"):
            return ref_id(ref["path"])
        return None
    value = getattr(ref, "id", None)
    return str(value) if value else None


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


def role_ids(recording: Any, role: Role) -> list[str]:
    """
    Person IDs for one role of a recording.

    Prefers the <role>Ids list whenever the document has one (an empty list
    included); otherwise derives IDs from the legacy <role>Refs list.
    """
    ids_key = f"{role}Ids"
    ids = field_value(recording, ids_key)
    if ids is not None and has_field(recording, ids_key):
        return [str(i) for i in ids]
    refs = field_value(recording, f"{role}Refs") or []
    return [rid for rid in (ref_id(r) for r in refs) if rid]


def all_role_ids(recording: Any) -> dict[Role, list[str]]:
    return {role: role_ids(recording, role) for role in ROLES}


def theatre_id(recording: Any) -> str | None:
    value = field_value(recording, "theatreId")
    if value:
        return str(value)
    return ref_id(field_value(recording, "theatreRef"))


def roles_for_person(recording: Any, person_id: str) -> list[Role]:
    """Roles in which a person appears on a recording."""
    return [role for role in ROLES if person_id in role_ids(recording, role)]


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


def unique_ids(ids: Iterable[str]) -> list[str]:
    """Drop duplicates and blanks, keeping selection order."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in ids:
        value = str(raw).strip()
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _index(records: Iterable[Any]) -> dict[str, Any]:
    return {str(field_value(r, "id")): r for r in records if field_value(r, "id") is not None}


def denormalize_people(
    selected: Mapping[str, Iterable[str]],
    people: Iterable[Any],
) -> dict[str, Any]:
    """
    Resolve selected Person IDs per role into the stored field set.

    Args:
        selected: role -> selected Person IDs
        people: Person records (mapping or model) to resolve names from

    Returns:
        Dict with <role>Ids, <role>Refs for every role and artistNames.
        IDs that do not resolve keep their ID and ref but add no name.
    """
    by_id = _index(people)
    payload: dict[str, Any] = {}
    for role in ROLES:
        ids = unique_ids(selected.get(role, ()))
        payload[f"{role}Ids"] = ids
        payload[f"{role}Refs"] = [make_ref(PEOPLE, i) for i in ids]
        if role == "artist":
            payload["artistNames"] = [
                field_value(by_id[i], "name") for i in ids if i in by_id and field_value(by_id[i], "name")
            ]
    return payload


def denormalize_theatre(selected_id: str | None, theatres: Iterable[Any]) -> dict[str, Any]:
    """
    Resolve the selected theatre into its stored field set.

    A selection that does not resolve writes nothing. No selection clears
    the theatre fields with explicit nulls.
    """
    if not selected_id:
        return {"theatreId": None, "theatreRef": None, "theatreName": None, "city": None}
    theatre = _index(theatres).get(selected_id)
    if theatre is None:
        return {}
    return {
        "theatreId": selected_id,
        "theatreRef": make_ref(THEATRES, selected_id),
        "theatreName": field_value(theatre, "name"),
        "city": field_value(theatre, "city"),
    }


def sanitize_payload(data: Any) -> Any:
    """
    Drop UNSET values before a write. The store rejects them; None is
    written as null.
    """
    if isinstance(data, Mapping):
        return {k: sanitize_payload(v) for k, v in data.items() if v is not UNSET}
    if isinstance(data, list):
        return [sanitize_payload(v) for v in data if v is not UNSET]
    return data


def build_recording_payload(
    fields: Mapping[str, Any],
    selected_people: Mapping[str, Iterable[str]],
    selected_theatre: str | None,
    people: Iterable[Any],
    theatres: Iterable[Any],
) -> dict[str, Any]:
    """
    Full write payload for a recording: the plain fields plus the
    denormalized people and theatre fields, with UNSET values removed.
    """
    payload: dict[str, Any] = dict(fields)
    payload.update(denormalize_people(selected_people, people))
    payload.update(denormalize_theatre(selected_theatre, theatres))
    return sanitize_payload(payload)
