"""Integration tests for recording, people, theatre and user routes."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _add_recording(store, title, day, **extra):
    return await store.add(
        "recordings",
        {"title": title, "dateAdded": datetime(2024, 1, day, tzinfo=UTC), **extra},
    )


# ── access control ──────────────────────────────────────────────────────────


class TestAccess:
    async def test_unauthenticated_is_401(self, async_client):
        res = await async_client.get("/api/recordings")
        assert res.status_code == 401

    async def test_bad_token_is_401(self, async_client):
        res = await async_client.get("/api/recordings", headers={"Authorization": "Bearer nope"})
        assert res.status_code == 401

    async def test_unknown_email_is_401(self, async_client):
        from stagevault.auth import create_id_token

        token = create_id_token(uid="stranger", email="stranger@example.com")
        res = await async_client.get("/api/recordings", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401

    async def test_viewer_can_browse(self, async_client, viewer_headers):
        res = await async_client.get("/api/recordings", headers=viewer_headers)
        assert res.status_code == 200

    async def test_viewer_cannot_admin(self, async_client, viewer_headers):
        res = await async_client.get("/api/admin/recordings", headers=viewer_headers)
        assert res.status_code == 403

    async def test_editor_cannot_manage_users(self, async_client, editor_headers):
        assert (await async_client.get("/api/admin/users", headers=editor_headers)).status_code == 200
        res = await async_client.post(
            "/api/admin/users",
            json={"email": "new@example.com", "role": "viewer"},
            headers=editor_headers,
        )
        assert res.status_code == 403

    async def test_session_cookie(self, async_client, viewer_headers):
        token = viewer_headers["Authorization"].removeprefix("Bearer ")
        res = await async_client.get("/auth/me", cookies={"session": token})
        assert res.status_code == 200
        assert res.json()["role"] == "viewer"


class TestAuthRoutes:
    async def test_session_exchange_sets_cookie(self, async_client, editor_headers):
        token = editor_headers["Authorization"].removeprefix("Bearer ")
        res = await async_client.post("/auth/session", json={"idToken": token})
        assert res.status_code == 200
        assert res.json()["email"] == "editor@example.com"
        assert "session" in res.headers.get("set-cookie", "")

    async def test_logout(self, async_client):
        res = await async_client.post("/auth/logout")
        assert res.status_code == 200


# ── public recordings ───────────────────────────────────────────────────────


class TestPublicRecordings:
    async def test_list_filter_sort_page(self, async_client, viewer_headers, memory_store):
        await _add_recording(memory_store, "La Bohème", 1, recordingDate="2023-05-15T00:00:00.000000+00:00")
        await _add_recording(memory_store, "Carmen", 2, recordingDate="2023-06-20T00:00:00.000000+00:00")
        await _add_recording(memory_store, "The Magic Flute", 3, recordingDate="2023-04-10T00:00:00.000000+00:00")
        res = await async_client.get(
            "/api/recordings",
            params={"sort": "recordingDate", "order": "desc"},
            headers=viewer_headers,
        )
        data = res.json()
        assert [r["title"] for r in data["items"]] == ["Carmen", "La Bohème", "The Magic Flute"]
        assert data["totalItems"] == 3
        assert data["totalPages"] == 1
        assert data["items"][0]["displayDate"] == "20 June 2023"

        res = await async_client.get("/api/recordings", params={"q": "CARMEN"}, headers=viewer_headers)
        assert [r["title"] for r in res.json()["items"]] == ["Carmen"]

    async def test_page_beyond_range_clamps(self, async_client, viewer_headers, memory_store):
        for day in range(1, 4):
            await _add_recording(memory_store, f"Show {day}", day)
        res = await async_client.get("/api/recordings", params={"page": 9, "page_size": 2}, headers=viewer_headers)
        data = res.json()
        assert data["page"] == 2
        assert len(data["items"]) == 1

    async def test_feed(self, async_client, viewer_headers, memory_store):
        for day in range(1, 13):
            await _add_recording(memory_store, f"Show {day}", day)
        first = (await async_client.get("/api/recordings/feed", headers=viewer_headers)).json()
        assert len(first["items"]) == 10
        assert first["items"][0]["title"] == "Show 12"
        assert first["hasMore"]
        second = (
            await async_client.get("/api/recordings/feed", params={"cursor": first["cursor"]}, headers=viewer_headers)
        ).json()
        assert [r["title"] for r in second["items"]] == ["Show 2", "Show 1"]
        assert not second["hasMore"]

    async def test_feed_bad_cursor_is_400(self, async_client, viewer_headers):
        res = await async_client.get("/api/recordings/feed", params={"cursor": "%%%"}, headers=viewer_headers)
        assert res.status_code == 400

    async def test_detail(self, async_client, viewer_headers, memory_store):
        person_id = await memory_store.add("people", {"name": "Jane Smith"})
        rec_id = await _add_recording(
            memory_store,
            "Cats",
            1,
            artistRefs=[f"people/{person_id}"],
            releaseYear=1995,
            datePrecision="year",
        )
        res = await async_client.get(f"/api/recordings/{rec_id}", headers=viewer_headers)
        assert res.status_code == 200
        data = res.json()
        assert data["recording"]["displayDate"] == "1995"
        assert [p["name"] for p in data["artists"]] == ["Jane Smith"]

    async def test_detail_not_found(self, async_client, viewer_headers):
        res = await async_client.get("/api/recordings/nope", headers=viewer_headers)
        assert res.status_code == 404
        assert res.json() == {"detail": "Recording not found."}

    async def test_update_missing_recording(self, async_client, editor_headers):
        res = await async_client.put("/api/admin/recordings/nope", json={"title": "Ghost"}, headers=editor_headers)
        assert res.status_code == 404
        assert res.json() == {"detail": "Recording not found."}

    async def test_missing_person_and_theatre_recordings(self, async_client, editor_headers):
        res = await async_client.get("/api/admin/people/nope/recordings", headers=editor_headers)
        assert res.status_code == 404
        assert res.json() == {"detail": "Person not found."}
        res = await async_client.get("/api/admin/theatres/nope/recordings", headers=editor_headers)
        assert res.status_code == 404
        assert res.json() == {"detail": "Theatre not found."}

    async def test_search_by_theatre_city(self, async_client, viewer_headers, memory_store):
        await _add_recording(memory_store, "Aida", 1, theatreName="La Scala", city="Milan")
        await _add_recording(memory_store, "Cats", 2, theatreName="New London Theatre", city="London")
        res = await async_client.get("/api/search", params={"q": "milan", "type": "theatre"}, headers=viewer_headers)
        assert [r["title"] for r in res.json()] == ["Aida"]
        res = await async_client.get("/api/search", params={"q": "milan", "type": "title"}, headers=viewer_headers)
        assert res.json() == []


# ── admin ───────────────────────────────────────────────────────────────────


class TestAdminRecordings:
    async def test_crud(self, async_client, editor_headers):
        theatre = (
            await async_client.post(
                "/api/admin/theatres",
                json={"name": "Royal Opera House", "city": "London", "country": "UK"},
                headers=editor_headers,
            )
        ).json()
        person = (
            await async_client.post("/api/admin/recordings/people", json={"name": "Jane Smith"}, headers=editor_headers)
        ).json()

        res = await async_client.post(
            "/api/admin/recordings",
            json={
                "title": "La Bohème",
                "recordingDate": "2023-05-15",
                "theatreId": theatre["id"],
                "artistIds": [person["id"]],
                "galleryImages": "https://a.example/1.jpg\n\n https://a.example/2.jpg ",
            },
            headers=editor_headers,
        )
        assert res.status_code == 201
        created = res.json()
        assert created["artistNames"] == ["Jane Smith"]
        assert created["theatreName"] == "Royal Opera House"
        assert created["galleryImages"] == ["https://a.example/1.jpg", "https://a.example/2.jpg"]
        assert created["displayDate"] == "15 May 2023"

        form = (await async_client.get(f"/api/admin/recordings/{created['id']}/form", headers=editor_headers)).json()
        assert form["recordingDate"] == "2023-05-15"
        assert form["artistIds"] == [person["id"]]

        res = await async_client.put(
            f"/api/admin/recordings/{created['id']}",
            json={"title": "La Bohème", "recordingDate": "1996", "datePrecision": "year"},
            headers=editor_headers,
        )
        assert res.status_code == 200
        assert res.json()["displayDate"] == "1996"
        assert res.json()["artistIds"] == []

        res = await async_client.delete(f"/api/admin/recordings/{created['id']}", headers=editor_headers)
        assert res.status_code == 200
        res = await async_client.delete(f"/api/admin/recordings/{created['id']}", headers=editor_headers)
        assert res.status_code == 404

    async def test_date_must_match_precision(self, async_client, editor_headers):
        res = await async_client.post(
            "/api/admin/recordings",
            json={"title": "Cats", "recordingDate": "1981-05-11", "datePrecision": "year"},
            headers=editor_headers,
        )
        assert res.status_code == 422

    async def test_unknown_fields_rejected(self, async_client, editor_headers):
        res = await async_client.post(
            "/api/admin/recordings",
            json={"title": "Cats", "artistNames": ["forged"]},
            headers=editor_headers,
        )
        assert res.status_code == 422

    async def test_admin_search_scope(self, async_client, editor_headers, memory_store):
        await _add_recording(memory_store, "Aida", 1, city="Milan", artistNames=["London Singer"])
        await _add_recording(memory_store, "Cats", 2, city="London")
        res = await async_client.get("/api/admin/recordings", params={"q": "london"}, headers=editor_headers)
        assert [r["title"] for r in res.json()["items"]] == ["Cats"]

    async def test_summary(self, async_client, editor_headers, memory_store):
        await _add_recording(memory_store, "Aida", 1)
        data = (await async_client.get("/api/admin/summary", headers=editor_headers)).json()
        assert data == {"displayName": "Editor", "recordings": 1, "people": 0, "theatres": 0}


class TestAdminPeopleAndTheatres:
    async def test_people_crud_and_recordings(self, async_client, editor_headers, memory_store):
        person = (
            await async_client.post(
                "/api/admin/people",
                json={"name": "Wolfgang Mozart", "info": "Composer"},
                headers=editor_headers,
            )
        ).json()
        await _add_recording(memory_store, "The Magic Flute", 1, composerRefs=[f"people/{person['id']}"])

        res = await async_client.get(f"/api/admin/people/{person['id']}/recordings", headers=editor_headers)
        assert [r["title"] for r in res.json()["composer"]] == ["The Magic Flute"]

        res = await async_client.patch(
            f"/api/admin/people/{person['id']}",
            json={"name": "W. A. Mozart"},
            headers=editor_headers,
        )
        assert res.json()["name"] == "W. A. Mozart"
        assert res.json()["info"] == "Composer"

        assert (await async_client.get("/api/admin/people/nope", headers=editor_headers)).status_code == 404
        res = await async_client.delete(f"/api/admin/people/{person['id']}", headers=editor_headers)
        assert res.status_code == 200

    async def test_theatre_requires_all_fields(self, async_client, editor_headers):
        res = await async_client.post(
            "/api/admin/theatres",
            json={"name": "Old Vic", "city": "London", "country": "  "},
            headers=editor_headers,
        )
        assert res.status_code == 422

    async def test_theatre_name_search(self, async_client, editor_headers):
        for name, city in (("Royal Opera House", "London"), ("La Scala", "Milan"), ("Royal Albert Hall", "London")):
            await async_client.post(
                "/api/admin/theatres",
                json={"name": name, "city": city, "country": "UK"},
                headers=editor_headers,
            )
        res = await async_client.get("/api/admin/theatres", params={"q": "royal"}, headers=editor_headers)
        assert [t["name"] for t in res.json()["items"]] == ["Royal Albert Hall", "Royal Opera House"]

    async def test_theatre_recordings(self, async_client, editor_headers, memory_store):
        theatre = (
            await async_client.post(
                "/api/admin/theatres",
                json={"name": "La Scala", "city": "Milan", "country": "Italy"},
                headers=editor_headers,
            )
        ).json()
        await _add_recording(memory_store, "Aida", 1, theatreId=theatre["id"])
        res = await async_client.get(f"/api/admin/theatres/{theatre['id']}/recordings", headers=editor_headers)
        assert [r["title"] for r in res.json()["recordings"]] == ["Aida"]


class TestAdminUsers:
    async def test_admin_manages_roles(self, async_client, admin_headers):
        res = await async_client.post(
            "/api/admin/users",
            json={"email": "New.Editor@Example.com", "role": "editor"},
            headers=admin_headers,
        )
        assert res.status_code == 201
        user = res.json()
        assert user["email"] == "new.editor@example.com"

        dup = await async_client.post(
            "/api/admin/users",
            json={"email": "new.editor@example.com"},
            headers=admin_headers,
        )
        assert dup.status_code == 409

        res = await async_client.patch(f"/api/admin/users/{user['id']}", json={"role": "admin"}, headers=admin_headers)
        assert res.json()["role"] == "admin"

        res = await async_client.delete(f"/api/admin/users/{user['id']}", headers=admin_headers)
        assert res.status_code == 200

    async def test_invalid_role_rejected(self, async_client, admin_headers):
        res = await async_client.post(
            "/api/admin/users",
            json={"email": "x@example.com", "role": "owner"},
            headers=admin_headers,
        )
        assert res.status_code == 422
