"""
HTTP API tests: routes, status codes and the error envelope.

Each test runs once per storage backing.
"""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from .helpers import bearer

IMAGE = "https://img.example.com/photo.jpg"


async def _login(client: AsyncClient, headers: dict) -> dict:
    response = await client.get("/api/auth/user", headers=headers)
    assert response.status_code == 200
    return response.json()


async def _create_club(client, alice_headers, bob_headers) -> dict:
    """Nature Club with alice as admin and bob as member."""
    await _login(client, alice_headers)
    await _login(client, bob_headers)
    response = await client.post(
        "/api/organizations",
        json={"name": "Nature Club", "description": "Wildlife"},
        headers=alice_headers,
    )
    assert response.status_code == 201
    club = response.json()
    response = await client.post(
        f"/api/organizations/{club['id']}/users",
        json={"user_id": "bob"},
        headers=alice_headers,
    )
    assert response.status_code == 201
    return club


async def _create_photo(client, headers, **overrides) -> dict:
    body = {"title": "Heron", "image_url": IMAGE}
    body.update(overrides)
    response = await client.post("/api/photos", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------

class TestErrorEnvelope:
    @pytest.mark.asyncio
    async def test_validation_failure_is_400_with_fields(self, client, alice_headers):
        response = await client.post(
            "/api/photos", json={"title": "", "image_url": "nope"}, headers=alice_headers
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_FAILED"
        assert error["status"] == 400
        assert set(error["fields"]) >= {"title", "image_url"}

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        response = await client.get("/api/organizations/999")
        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "NOT_FOUND", "message": "Organization not found", "status": 404}
        }

    @pytest.mark.asyncio
    async def test_mutation_requires_identity(self, client):
        response = await client.post("/api/organizations", json={"name": "Anon"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HTTP_ERROR"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class TestUserRoutes:
    @pytest.mark.asyncio
    async def test_profile_edits(self, client, alice_headers, bob_headers):
        await _login(client, bob_headers)
        response = await client.post(
            "/api/users/username", json={"username": "alice_w"}, headers=alice_headers
        )
        assert response.status_code == 200
        assert response.json()["username"] == "alice_w"

        taken = await client.post(
            "/api/users/username", json={"username": "alice_w"}, headers=bob_headers
        )
        assert taken.status_code == 400
        assert "username" in taken.json()["error"]["fields"]

        bio = await client.post("/api/users/bio", json={"bio": "Birder"}, headers=alice_headers)
        assert bio.json()["bio"] == "Birder"

    @pytest.mark.asyncio
    async def test_stats(self, client, alice_headers, bob_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        await client.post(
            f"/api/organizations/{club['id']}/competitions",
            json={"name": "Spring Bloom"},
            headers=alice_headers,
        )
        await _create_photo(client, bob_headers)

        response = await client.get("/api/users/bob/stats")
        assert response.status_code == 200
        assert response.json() == {
            "photo_count": 1,
            "gallery_count": 0,
            "organization_count": 1,
            "competition_count": 1,
        }

        ghost = await client.get("/api/users/ghost/stats")
        assert ghost.status_code == 200
        assert ghost.json()["photo_count"] == 0


# ---------------------------------------------------------------------------
# Photos & galleries
# ---------------------------------------------------------------------------

class TestPhotoRoutes:
    @pytest.mark.asyncio
    async def test_crud_and_views(self, client, alice_headers, bob_headers):
        await _login(client, alice_headers)
        photo = await _create_photo(client, bob_headers)
        assert photo["view_count"] == 0
        assert photo["user_id"] == "bob"

        first = await client.get(f"/api/photos/{photo['id']}")
        second = await client.get(f"/api/photos/{photo['id']}")
        assert first.json()["view_count"] == 1
        assert second.json()["view_count"] == 2

        forbidden = await client.put(
            f"/api/photos/{photo['id']}", json={"title": "Mine now"}, headers=alice_headers
        )
        assert forbidden.status_code == 403

        updated = await client.put(
            f"/api/photos/{photo['id']}", json={"title": "Grey heron"}, headers=bob_headers
        )
        assert updated.json()["title"] == "Grey heron"
        assert updated.json()["image_url"] == IMAGE

        deleted = await client.delete(f"/api/photos/{photo['id']}", headers=bob_headers)
        assert deleted.status_code == 204
        assert (await client.get(f"/api/photos/{photo['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_private_photos_hidden_from_others(self, client, alice_headers, bob_headers):
        await _login(client, alice_headers)
        public = await _create_photo(client, bob_headers, title="Public")
        private = await _create_photo(client, bob_headers, title="Private", is_public=False)

        assert (await client.get(f"/api/photos/{private['id']}")).status_code == 404
        assert (
            await client.get(f"/api/photos/{private['id']}", headers=alice_headers)
        ).status_code == 404
        assert (
            await client.get(f"/api/photos/{private['id']}", headers=bob_headers)
        ).status_code == 200

        anonymous = await client.get("/api/photos/user/bob")
        assert [p["id"] for p in anonymous.json()] == [public["id"]]
        owner = await client.get("/api/photos/user/bob", headers=bob_headers)
        assert [p["id"] for p in owner.json()] == [private["id"], public["id"]]

    @pytest.mark.asyncio
    async def test_recent_photos_with_owner(self, client, alice_headers, bob_headers):
        await _create_photo(client, alice_headers, title="a")
        await _create_photo(client, bob_headers, title="b")
        await _create_photo(client, bob_headers, title="hidden", is_public=False)

        response = await client.get("/api/photos", params={"limit": 1})
        body = response.json()
        assert len(body) == 1
        assert body[0]["title"] == "b"
        assert body[0]["user"]["id"] == "bob"

        assert len((await client.get("/api/photos")).json()) == 2
        assert (await client.get("/api/photos", params={"limit": 0})).status_code == 400

    @pytest.mark.asyncio
    async def test_general_rating(self, client, alice_headers, bob_headers, carol_headers):
        await _login(client, alice_headers)
        photo = await _create_photo(client, bob_headers)

        for headers, value in ((alice_headers, 2), (alice_headers, 4), (carol_headers, 5)):
            response = await client.post(
                f"/api/photos/{photo['id']}/rate", json={"rating": value}, headers=headers
            )
            assert response.status_code == 200

        summary = (await client.get(f"/api/photos/{photo['id']}/ratings")).json()
        assert len(summary["ratings"]) == 2
        assert summary["avg_rating"] == pytest.approx(4.5)

        out_of_range = await client.post(
            f"/api/photos/{photo['id']}/rate", json={"rating": 6}, headers=alice_headers
        )
        assert out_of_range.status_code == 400

    @pytest.mark.asyncio
    async def test_unrated_photo_average_is_null(self, client, bob_headers):
        photo = await _create_photo(client, bob_headers)
        summary = (await client.get(f"/api/photos/{photo['id']}/ratings")).json()
        assert summary == {"ratings": [], "avg_rating": None}


class TestGalleryRoutes:
    @pytest.mark.asyncio
    async def test_gallery_lifecycle(self, client, alice_headers, bob_headers):
        await _login(client, alice_headers)
        response = await client.post("/api/galleries", json={"name": "Birds"}, headers=bob_headers)
        assert response.status_code == 201
        gallery = response.json()

        photo = await _create_photo(client, bob_headers, gallery_id=gallery["id"])
        cover = await client.put(
            f"/api/galleries/{gallery['id']}",
            json={"cover_photo_id": photo["id"]},
            headers=bob_headers,
        )
        assert cover.json()["cover_photo_id"] == photo["id"]

        photos = await client.get(f"/api/galleries/{gallery['id']}/photos")
        assert [p["id"] for p in photos.json()] == [photo["id"]]

        viewed = await client.get(f"/api/galleries/{gallery['id']}")
        assert viewed.json()["view_count"] == 1
        liked = await client.post(f"/api/galleries/{gallery['id']}/like", headers=alice_headers)
        assert liked.json()["like_count"] == 1

        listing = await client.get("/api/galleries/user/bob")
        assert [g["id"] for g in listing.json()] == [gallery["id"]]

        assert (
            await client.delete(f"/api/galleries/{gallery['id']}", headers=alice_headers)
        ).status_code == 403
        assert (
            await client.delete(f"/api/galleries/{gallery['id']}", headers=bob_headers)
        ).status_code == 204

        survivor = (await client.get(f"/api/photos/{photo['id']}")).json()
        assert survivor["gallery_id"] is None

    @pytest.mark.asyncio
    async def test_cannot_file_photo_in_someone_elses_gallery(
        self, client, alice_headers, bob_headers
    ):
        gallery = (
            await client.post("/api/galleries", json={"name": "Mine"}, headers=alice_headers)
        ).json()
        response = await client.post(
            "/api/photos",
            json={"title": "Sneaky", "image_url": IMAGE, "gallery_id": gallery["id"]},
            headers=bob_headers,
        )
        assert response.status_code == 403

        missing = await client.post(
            "/api/photos",
            json={"title": "Lost", "image_url": IMAGE, "gallery_id": 999},
            headers=bob_headers,
        )
        assert missing.status_code == 404


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

class TestOrganizationRoutes:
    @pytest.mark.asyncio
    async def test_creator_is_listed_as_admin(self, client, alice_headers, bob_headers):
        club = await _create_club(client, alice_headers, bob_headers)

        admins = (await client.get(f"/api/organizations/{club['id']}/admins")).json()
        assert [a["user"]["id"] for a in admins] == ["alice"]

        members = (await client.get(f"/api/organizations/{club['id']}/users")).json()
        assert {m["user_id"]: m["is_admin"] for m in members} == {"alice": True, "bob": False}

        mine = (await client.get("/api/organizations/user/bob")).json()
        assert [o["name"] for o in mine] == ["Nature Club"]
        assert [o["id"] for o in (await client.get("/api/organizations")).json()] == [club["id"]]

    @pytest.mark.asyncio
    async def test_admin_only_mutations(self, client, alice_headers, bob_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        url = f"/api/organizations/{club['id']}"

        assert (await client.put(url, json={"name": "Bob's"}, headers=bob_headers)).status_code == 403
        assert (await client.delete(url, headers=bob_headers)).status_code == 403
        assert (
            await client.delete(f"{url}/users/alice", headers=bob_headers)
        ).status_code == 403

        renamed = await client.put(url, json={"name": "Nature & Wildlife"}, headers=alice_headers)
        assert renamed.status_code == 200
        assert renamed.json()["name"] == "Nature & Wildlife"
        assert renamed.json()["description"] == "Wildlife"

        null_name = await client.put(url, json={"name": None}, headers=alice_headers)
        assert null_name.status_code == 400

    @pytest.mark.asyncio
    async def test_last_admin_cannot_leave(self, client, alice_headers, bob_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        url = f"/api/organizations/{club['id']}/users"

        response = await client.delete(f"{url}/alice", headers=alice_headers)
        assert response.status_code == 400

        assert (await client.delete(f"{url}/bob", headers=alice_headers)).status_code == 204
        assert (await client.delete(f"{url}/bob", headers=alice_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_organization(self, client, alice_headers, bob_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        url = f"/api/organizations/{club['id']}"
        assert (await client.delete(url, headers=alice_headers)).status_code == 204
        assert (await client.get(url)).status_code == 404
        assert (await client.get("/api/organizations/user/bob")).json() == []


# ---------------------------------------------------------------------------
# Competitions
# ---------------------------------------------------------------------------

class TestCompetitionRoutes:
    @pytest.mark.asyncio
    async def test_nature_club_flow(self, client, alice_headers, bob_headers, carol_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        await _login(client, carol_headers)

        response = await client.post(
            f"/api/organizations/{club['id']}/competitions",
            json={"name": "Spring Bloom"},
            headers=alice_headers,
        )
        assert response.status_code == 201
        contest = response.json()
        assert contest["is_active"] is True

        active = (await client.get("/api/competitions")).json()
        assert [c["id"] for c in active] == [contest["id"]]

        photo = await _create_photo(client, bob_headers, title="Cherry blossom")
        entries_url = f"/api/competitions/{contest['id']}/photos"

        # alice is a member but not the owner
        rejected = await client.post(entries_url, json={"photo_id": photo["id"]}, headers=alice_headers)
        assert rejected.status_code == 403
        assert rejected.json()["error"]["code"] == "NOT_OWNER"

        entered = await client.post(entries_url, json={"photo_id": photo["id"]}, headers=bob_headers)
        assert entered.status_code == 201

        entries = (await client.get(entries_url)).json()
        assert [e["photo"]["id"] for e in entries] == [photo["id"]]

        rate_url = f"/api/photos/{photo['id']}/rate"
        body = {"rating": 4, "is_competition_rating": True, "competition_id": contest["id"]}
        assert (await client.post(rate_url, json=body, headers=carol_headers)).status_code == 403
        assert (await client.post(rate_url, json=body, headers=alice_headers)).status_code == 200

        ratings_url = f"{entries_url}/{photo['id']}/ratings"
        assert (await client.get(ratings_url)).json()["avg_rating"] == 4

        # deleting the competition drops the entry but not the photo
        assert (
            await client.delete(f"/api/competitions/{contest['id']}", headers=alice_headers)
        ).status_code == 204
        assert (await client.get(f"/api/photos/{photo['id']}")).status_code == 200
        assert (await client.get(entries_url)).status_code == 404

    @pytest.mark.asyncio
    async def test_inactive_competition_rejects_entries(self, client, alice_headers, bob_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        contest = (
            await client.post(
                f"/api/organizations/{club['id']}/competitions",
                json={"name": "Closed", "is_active": False},
                headers=alice_headers,
            )
        ).json()
        photo = await _create_photo(client, bob_headers)

        response = await client.post(
            f"/api/competitions/{contest['id']}/photos",
            json={"photo_id": photo["id"]},
            headers=bob_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "COMPETITION_INACTIVE"
        assert (await client.get("/api/competitions")).json() == []

    @pytest.mark.asyncio
    async def test_competition_rating_needs_submission(self, client, alice_headers, bob_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        contest = (
            await client.post(
                f"/api/organizations/{club['id']}/competitions",
                json={"name": "Spring"},
                headers=alice_headers,
            )
        ).json()
        photo = await _create_photo(client, bob_headers)

        missing_id = await client.post(
            f"/api/photos/{photo['id']}/rate",
            json={"rating": 3, "is_competition_rating": True},
            headers=alice_headers,
        )
        assert missing_id.status_code == 400

        not_entered = await client.post(
            f"/api/photos/{photo['id']}/rate",
            json={"rating": 3, "is_competition_rating": True, "competition_id": contest["id"]},
            headers=alice_headers,
        )
        assert not_entered.status_code == 400
        assert not_entered.json()["error"]["code"] == "PHOTO_NOT_SUBMITTED"

    @pytest.mark.asyncio
    async def test_withdraw(self, client, alice_headers, bob_headers, carol_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        await _login(client, carol_headers)
        contest = (
            await client.post(
                f"/api/organizations/{club['id']}/competitions",
                json={"name": "Spring"},
                headers=alice_headers,
            )
        ).json()
        photo = await _create_photo(client, bob_headers)
        url = f"/api/competitions/{contest['id']}/photos"
        await client.post(url, json={"photo_id": photo["id"]}, headers=bob_headers)

        assert (await client.delete(f"{url}/{photo['id']}", headers=carol_headers)).status_code == 403
        assert (await client.delete(f"{url}/{photo['id']}", headers=alice_headers)).status_code == 204
        assert (await client.delete(f"{url}/{photo['id']}", headers=bob_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_update_competition(self, client, alice_headers, bob_headers):
        club = await _create_club(client, alice_headers, bob_headers)
        contest = (
            await client.post(
                f"/api/organizations/{club['id']}/competitions",
                json={"name": "Spring"},
                headers=alice_headers,
            )
        ).json()
        url = f"/api/competitions/{contest['id']}"

        assert (await client.put(url, json={"is_active": False}, headers=bob_headers)).status_code == 403
        closed = await client.put(url, json={"is_active": False}, headers=alice_headers)
        assert closed.json()["is_active"] is False
        assert (await client.get(url)).json()["name"] == "Spring"

        listed = (await client.get(f"/api/organizations/{club['id']}/competitions")).json()
        assert [c["id"] for c in listed] == [contest["id"]]
