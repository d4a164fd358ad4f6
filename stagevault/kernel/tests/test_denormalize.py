"""
StageVault Kernel -- Denormalization Tests

Covers:
  - Legacy documents with only *Refs yield the same IDs as *Ids would
  - ID lists win over refs, an empty ID list included
  - Write payload carries Ids, Refs and artistNames for every role
  - Unresolved people keep their ID but add no name
  - Theatre snapshot, clearing, and unresolved selections
  - UNSET fields are dropped before writing
"""

from __future__ import annotations

from stagevault.kernel.denormalize import (
    all_role_ids,
    build_recording_payload,
    denormalize_people,
    denormalize_theatre,
    make_ref,
    ref_id,
    role_ids,
    roles_for_person,
    sanitize_payload,
    theatre_id,
    unique_ids,
)
from stagevault.kernel.types import UNSET
from stagevault.models.recording import Recording


class TestRefHandles:
    def test_make_and_read_ref(self):
        assert make_ref("people", "p1") == "people/p1"
        assert ref_id("people/p1") == "p1"

    def test_ref_shapes(self):
        assert ref_id({"path": "theatres/t1"}) == "t1"
        assert ref_id({"id": "t2"}) == "t2"
        assert ref_id({}) is None
        assert ref_id(None) is None


class TestLegacyRead:
    def test_refs_only_matches_ids(self):
        modern = {"artistIds": ["p1", "p2"], "composerIds": ["p3"], "lyricistIds": []}
        legacy = {
            "artistRefs": ["people/p1", {"path": "people/p2"}],
            "composerRefs": [{"id": "p3"}],
            "lyricistRefs": [],
        }
        assert all_role_ids(legacy) == all_role_ids(modern)

    def test_ids_win_over_refs(self):
        record = {"artistIds": ["p1"], "artistRefs": ["people/p9"]}
        assert role_ids(record, "artist") == ["p1"]

    def test_empty_id_list_wins(self):
        record = {"artistIds": [], "artistRefs": ["people/p9"]}
        assert role_ids(record, "artist") == []

    def test_null_id_list_falls_back(self):
        record = {"artistIds": None, "artistRefs": ["people/p9"]}
        assert role_ids(record, "artist") == ["p9"]

    def test_legacy_model(self):
        recording = Recording.model_validate({"id": "r1", "title": "Carmen", "lyricistRefs": ["people/p4"]})
        assert role_ids(recording, "lyricist") == ["p4"]
        assert role_ids(recording, "artist") == []

    def test_theatre_id_from_ref(self):
        assert theatre_id({"theatreRef": "theatres/t1"}) == "t1"
        assert theatre_id({"theatreId": "t2", "theatreRef": "theatres/t1"}) == "t2"
        assert theatre_id({}) is None

    def test_roles_for_person(self):
        record = {"artistIds": ["p1"], "composerIds": ["p1"], "lyricistRefs": ["people/p2"]}
        assert roles_for_person(record, "p1") == ["artist", "composer"]
        assert roles_for_person(record, "p2") == ["lyricist"]


class TestPeopleWrite:
    def test_every_role_gets_ids_and_refs(self, people):
        payload = denormalize_people({"artist": ["person-1"], "composer": ["person-3"]}, people)
        assert payload["artistIds"] == ["person-1"]
        assert payload["artistRefs"] == ["people/person-1"]
        assert payload["composerIds"] == ["person-3"]
        assert payload["lyricistIds"] == []
        assert payload["lyricistRefs"] == []

    def test_artist_names_follow_selection_order(self, people):
        payload = denormalize_people({"artist": ["person-2", "person-1"]}, people)
        assert payload["artistNames"] == ["Jane Smith", "John Doe"]

    def test_unresolved_person_keeps_id_without_name(self, people):
        payload = denormalize_people({"artist": ["person-1", "ghost"]}, people)
        assert payload["artistIds"] == ["person-1", "ghost"]
        assert payload["artistNames"] == ["John Doe"]

    def test_unique_ids(self):
        assert unique_ids(["a", " a ", "", "b", "a"]) == ["a", "b"]


class TestTheatreWrite:
    def test_selected_theatre_snapshot(self, theatres):
        assert denormalize_theatre("theatre-2", theatres) == {
            "theatreId": "theatre-2",
            "theatreRef": "theatres/theatre-2",
            "theatreName": "La Scala",
            "city": "Milan",
        }

    def test_no_selection_clears(self, theatres):
        payload = denormalize_theatre(None, theatres)
        assert payload == {"theatreId": None, "theatreRef": None, "theatreName": None, "city": None}

    def test_unresolved_selection_writes_nothing(self, theatres):
        assert denormalize_theatre("gone", theatres) == {}


class TestBuildPayload:
    def test_full_payload(self, people, theatres):
        payload = build_recording_payload(
            {"title": "Carmen", "galleryImages": UNSET},
            {"artist": ["person-1"]},
            "theatre-1",
            people,
            theatres,
        )
        assert "galleryImages" not in payload
        assert payload["title"] == "Carmen"
        assert payload["artistNames"] == ["John Doe"]
        assert payload["theatreName"] == "Royal Opera House"

    def test_sanitize_nested(self):
        assert sanitize_payload({"a": UNSET, "b": [1, UNSET], "c": {"d": UNSET}, "e": None}) == {
            "b": [1],
            "c": {},
            "e": None,
        }
