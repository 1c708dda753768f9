"""
Entity store tests, run against both the in-memory and the SQLite-backed store.

Covers:
- Not-found contract (None / False, never an exception)
- Upserts (users, memberships, submissions, ratings)
- Deterministic ordering of listings
- Cascades on delete
- View and like counters
"""

from __future__ import annotations

import pytest

from app.models.base import utcnow
from app.storage import DuplicateValueError


async def _photo(storage, user_id="bob", **overrides):
    data = {
        "title": "Heron",
        "image_url": "https://img.example.com/heron.jpg",
        "user_id": user_id,
        "is_public": True,
    }
    data.update(overrides)
    return await storage.create_photo(data)


async def _competition(storage, organization_id, **overrides):
    data = {"name": "Spring Bloom", "organization_id": organization_id, "start_date": utcnow()}
    data.update(overrides)
    return await storage.create_competition(data)


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------

class TestNotFound:
    @pytest.mark.asyncio
    async def test_lookups_return_none(self, storage):
        assert await storage.get_user("ghost") is None
        assert await storage.get_user_by_username("ghost") is None
        assert await storage.get_organization(999) is None
        assert await storage.get_photo(999) is None
        assert await storage.get_gallery(999) is None
        assert await storage.get_competition(999) is None
        assert await storage.get_user_organization("ghost", 999) is None

    @pytest.mark.asyncio
    async def test_updates_return_none(self, storage):
        assert await storage.update_username("ghost", "x") is None
        assert await storage.update_user_bio("ghost", "x") is None
        assert await storage.update_organization(999, {"name": "x"}) is None
        assert await storage.update_photo(999, {"title": "x"}) is None
        assert await storage.update_gallery(999, {"name": "x"}) is None
        assert await storage.update_competition(999, {"name": "x"}) is None

    @pytest.mark.asyncio
    async def test_deletes_return_false(self, storage):
        assert await storage.delete_user("ghost") is False
        assert await storage.delete_organization(999) is False
        assert await storage.delete_photo(999) is False
        assert await storage.delete_gallery(999) is False
        assert await storage.delete_competition(999) is False
        assert await storage.remove_user_from_organization("ghost", 999) is False
        assert await storage.remove_photo_from_competition(999, 999) is False

    @pytest.mark.asyncio
    async def test_empty_listings(self, storage):
        assert await storage.get_organizations() == []
        assert await storage.get_recent_photos() == []
        assert await storage.get_active_competitions() == []
        assert await storage.get_photo_average_rating(999) is None


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class TestUsers:
    @pytest.mark.asyncio
    async def test_upsert_creates_then_updates(self, storage):
        created = await storage.upsert_user({"id": "u1", "email": "u1@example.com"})
        assert created.email == "u1@example.com"

        updated = await storage.upsert_user({"id": "u1", "first_name": "Una"})
        assert updated.first_name == "Una"
        assert updated.email == "u1@example.com"
        assert updated.created_at == created.created_at

    @pytest.mark.asyncio
    async def test_username_lookup(self, storage, users):
        await storage.update_username("alice", "ali")
        user = await storage.get_user_by_username("ali")
        assert user is not None and user.id == "alice"
        assert await storage.get_user_by_username("alice") is None

    @pytest.mark.asyncio
    async def test_email_and_username_are_unique(self, storage, users):
        with pytest.raises(DuplicateValueError) as exc_info:
            await storage.upsert_user({"id": "dave", "email": "alice@example.com"})
        assert exc_info.value.field == "email"
        assert await storage.get_user("dave") is None

        with pytest.raises(DuplicateValueError) as exc_info:
            await storage.upsert_user({"id": "bob", "username": "alice"})
        assert exc_info.value.field == "username"
        assert (await storage.get_user("bob")).username == "bob"

        with pytest.raises(DuplicateValueError):
            await storage.update_username("carol", "bob")
        assert (await storage.get_user("carol")).username == "carol"

    @pytest.mark.asyncio
    async def test_rewriting_own_values_is_allowed(self, storage, users):
        user = await storage.upsert_user(
            {"id": "alice", "email": "alice@example.com", "username": "alice"}
        )
        assert user.username == "alice"
        assert (await storage.update_username("alice", "alice")).username == "alice"

    @pytest.mark.asyncio
    async def test_returned_entities_are_detached(self, storage, users):
        user = await storage.get_user("alice")
        user.bio = "changed locally"
        assert (await storage.get_user("alice")).bio is None

    @pytest.mark.asyncio
    async def test_delete_user_cascades(self, storage, users):
        org = await storage.create_organization({"name": "Nature Club"}, "alice")
        await storage.add_user_to_organization("bob", org.id)
        gallery = await storage.create_gallery({"name": "Birds", "user_id": "bob"})
        photo = await _photo(storage, gallery_id=gallery.id)
        await storage.rate_photo({"photo_id": photo.id, "user_id": "bob", "rating": 3})

        alice_photo = await _photo(storage, user_id="alice")
        await storage.rate_photo({"photo_id": alice_photo.id, "user_id": "bob", "rating": 5})

        assert await storage.delete_user("bob") is True
        assert await storage.get_user("bob") is None
        assert await storage.get_user_organization("bob", org.id) is None
        assert await storage.get_photo(photo.id) is None
        assert await storage.get_gallery(gallery.id) is None
        assert await storage.get_photo_ratings(alice_photo.id) == []
        assert await storage.get_organization(org.id) is not None


# ---------------------------------------------------------------------------
# Organizations & memberships
# ---------------------------------------------------------------------------

class TestOrganizations:
    @pytest.mark.asyncio
    async def test_creator_is_admin_immediately(self, storage, users):
        org = await storage.create_organization({"name": "Nature Club"}, "alice")
        assert await storage.is_user_organization_admin("alice", org.id)
        admins = await storage.get_organization_admins(org.id)
        assert [u.id for _, u in admins] == ["alice"]

    @pytest.mark.asyncio
    async def test_listing_by_name(self, storage, users):
        await storage.create_organization({"name": "Zeta"}, "alice")
        await storage.create_organization({"name": "Alpha"}, "bob")
        await storage.create_organization({"name": "Mid"}, "alice")

        assert [o.name for o in await storage.get_organizations()] == ["Alpha", "Mid", "Zeta"]
        assert [o.name for o in await storage.get_organizations_by_user("alice")] == ["Mid", "Zeta"]

    @pytest.mark.asyncio
    async def test_membership_upsert_overwrites_role(self, storage, users):
        org = await storage.create_organization({"name": "Club"}, "alice")
        await storage.add_user_to_organization("bob", org.id)
        await storage.add_user_to_organization("bob", org.id, is_admin=True)

        members = await storage.get_organization_users(org.id)
        assert len(members) == 2
        assert await storage.is_user_organization_admin("bob", org.id)

    @pytest.mark.asyncio
    async def test_members_ordered_by_username(self, storage, users):
        await storage.upsert_user({"id": "dave"})  # no username: sorts first
        org = await storage.create_organization({"name": "Club"}, "carol")
        for uid in ("bob", "dave", "alice"):
            await storage.add_user_to_organization(uid, org.id)

        members = await storage.get_organization_users(org.id)
        assert [u.id for _, u in members] == ["dave", "alice", "bob", "carol"]

    @pytest.mark.asyncio
    async def test_remove_member(self, storage, users):
        org = await storage.create_organization({"name": "Club"}, "alice")
        await storage.add_user_to_organization("bob", org.id)
        assert await storage.remove_user_from_organization("bob", org.id) is True
        assert await storage.remove_user_from_organization("bob", org.id) is False

    @pytest.mark.asyncio
    async def test_delete_cascades_to_competitions(self, storage, users):
        org = await storage.create_organization({"name": "Club"}, "alice")
        await storage.add_user_to_organization("bob", org.id)
        competition = await _competition(storage, org.id)
        photo = await _photo(storage)
        await storage.add_photo_to_competition(competition.id, photo.id)

        assert await storage.delete_organization(org.id) is True
        assert await storage.get_user_organization("alice", org.id) is None
        assert await storage.get_competition(competition.id) is None
        assert not await storage.is_photo_in_competition(photo.id, competition.id)
        assert await storage.get_photo(photo.id) is not None


# ---------------------------------------------------------------------------
# Photos & galleries
# ---------------------------------------------------------------------------

class TestPhotosAndGalleries:
    @pytest.mark.asyncio
    async def test_recent_photos_public_newest_first(self, storage, users):
        p1 = await _photo(storage, title="one")
        await _photo(storage, title="hidden", is_public=False)
        p3 = await _photo(storage, user_id="alice", title="three")
        p4 = await _photo(storage, title="four")

        recent = await storage.get_recent_photos(limit=2)
        assert [p.id for p, _ in recent] == [p4.id, p3.id]
        assert recent[1][1].id == "alice"

        everything = await storage.get_recent_photos()
        assert [p.id for p, _ in everything] == [p4.id, p3.id, p1.id]

    @pytest.mark.asyncio
    async def test_counters_start_at_zero_and_increment(self, storage, users):
        photo = await _photo(storage)
        gallery = await storage.create_gallery({"name": "Birds", "user_id": "bob"})
        assert photo.view_count == 0
        assert (gallery.view_count, gallery.like_count) == (0, 0)

        for _ in range(3):
            await storage.increment_photo_views(photo.id)
        await storage.increment_gallery_views(gallery.id)
        await storage.increment_gallery_likes(gallery.id)
        await storage.increment_gallery_likes(gallery.id)

        assert (await storage.get_photo(photo.id)).view_count == 3
        gallery = await storage.get_gallery(gallery.id)
        assert (gallery.view_count, gallery.like_count) == (1, 2)

    @pytest.mark.asyncio
    async def test_deleting_gallery_detaches_photos(self, storage, users):
        gallery = await storage.create_gallery({"name": "Birds", "user_id": "bob"})
        photo = await _photo(storage, gallery_id=gallery.id)
        assert [p.id for p in await storage.get_photos_by_gallery(gallery.id)] == [photo.id]

        assert await storage.delete_gallery(gallery.id) is True
        survivor = await storage.get_photo(photo.id)
        assert survivor is not None
        assert survivor.gallery_id is None

    @pytest.mark.asyncio
    async def test_deleting_cover_photo_clears_cover(self, storage, users):
        photo = await _photo(storage)
        gallery = await storage.create_gallery(
            {"name": "Birds", "user_id": "bob", "cover_photo_id": photo.id}
        )
        await storage.delete_photo(photo.id)
        assert (await storage.get_gallery(gallery.id)).cover_photo_id is None

    @pytest.mark.asyncio
    async def test_update_photo_detaches_with_explicit_none(self, storage, users):
        gallery = await storage.create_gallery({"name": "Birds", "user_id": "bob"})
        photo = await _photo(storage, gallery_id=gallery.id)
        updated = await storage.update_photo(photo.id, {"gallery_id": None, "title": "Egret"})
        assert updated.gallery_id is None
        assert updated.title == "Egret"


# ---------------------------------------------------------------------------
# Competitions & submissions
# ---------------------------------------------------------------------------

class TestSubmissions:
    @pytest.mark.asyncio
    async def test_resubmission_keeps_one_row(self, storage, users):
        org = await storage.create_organization({"name": "Club"}, "alice")
        competition = await _competition(storage, org.id)
        first = await _photo(storage, title="first")
        second = await _photo(storage, title="second")

        await storage.add_photo_to_competition(competition.id, first.id)
        await storage.add_photo_to_competition(competition.id, second.id)
        await storage.add_photo_to_competition(competition.id, first.id)

        entries = await storage.get_competition_photos(competition.id)
        assert [p.id for _, p in entries] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_active_competitions(self, storage, users):
        org = await storage.create_organization({"name": "Club"}, "alice")
        open_ = await _competition(storage, org.id, name="Open")
        closed = await _competition(storage, org.id, name="Closed", is_active=False)

        assert [c.id for c in await storage.get_active_competitions()] == [open_.id]
        listed = await storage.get_competitions_by_organization(org.id)
        assert [c.id for c in listed] == [closed.id, open_.id]

    @pytest.mark.asyncio
    async def test_nature_club_competition_deletion(self, storage, users):
        club = await storage.create_organization({"name": "Nature Club"}, "alice")
        await storage.add_user_to_organization("bob", club.id)
        contest = await _competition(storage, club.id)
        photo = await _photo(storage)
        await storage.add_photo_to_competition(contest.id, photo.id)
        await storage.rate_photo(
            {
                "photo_id": photo.id,
                "user_id": "alice",
                "rating": 4,
                "is_competition_rating": True,
                "competition_id": contest.id,
            }
        )
        await storage.rate_photo({"photo_id": photo.id, "user_id": "alice", "rating": 2})

        assert await storage.delete_competition(contest.id) is True
        assert not await storage.is_photo_in_competition(photo.id, contest.id)
        assert await storage.get_photo(photo.id) is not None
        assert await storage.get_competition_photo_ratings(photo.id, contest.id) == []
        assert await storage.get_photo_average_rating(photo.id) == 2

    @pytest.mark.asyncio
    async def test_deleting_photo_removes_entries(self, storage, users):
        org = await storage.create_organization({"name": "Club"}, "alice")
        competition = await _competition(storage, org.id)
        photo = await _photo(storage)
        await storage.add_photo_to_competition(competition.id, photo.id)

        await storage.delete_photo(photo.id)
        assert await storage.get_competition_photos(competition.id) == []


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------

class TestRatings:
    @pytest.mark.asyncio
    async def test_rerating_keeps_latest_value(self, storage, users):
        photo = await _photo(storage)
        await storage.rate_photo({"photo_id": photo.id, "user_id": "alice", "rating": 2})
        await storage.rate_photo({"photo_id": photo.id, "user_id": "alice", "rating": 5})
        await storage.rate_photo({"photo_id": photo.id, "user_id": "carol", "rating": 3})

        ratings = await storage.get_photo_ratings(photo.id)
        assert [(r.user_id, r.rating) for r in ratings] == [("alice", 5), ("carol", 3)]
        assert await storage.get_photo_average_rating(photo.id) == pytest.approx(4.0)

    @pytest.mark.asyncio
    async def test_contexts_are_independent(self, storage, users):
        org = await storage.create_organization({"name": "Club"}, "alice")
        first = await _competition(storage, org.id, name="First")
        second = await _competition(storage, org.id, name="Second")
        photo = await _photo(storage)

        await storage.rate_photo({"photo_id": photo.id, "user_id": "alice", "rating": 1})
        for competition, value in ((first, 4), (second, 5)):
            await storage.rate_photo(
                {
                    "photo_id": photo.id,
                    "user_id": "alice",
                    "rating": value,
                    "is_competition_rating": True,
                    "competition_id": competition.id,
                }
            )

        assert await storage.get_photo_average_rating(photo.id) == 1
        assert await storage.get_competition_photo_average_rating(photo.id, first.id) == 4
        assert await storage.get_competition_photo_average_rating(photo.id, second.id) == 5

        rating = await storage.get_photo_rating(photo.id, "alice", True, second.id)
        assert rating is not None and rating.rating == 5
        general = await storage.get_photo_rating(photo.id, "alice", False)
        assert general is not None and general.rating == 1

    @pytest.mark.asyncio
    async def test_general_rating_ignores_competition_id(self, storage, users):
        org = await storage.create_organization({"name": "Club"}, "alice")
        competition = await _competition(storage, org.id)
        photo = await _photo(storage)

        rating = await storage.rate_photo(
            {"photo_id": photo.id, "user_id": "alice", "rating": 3, "competition_id": competition.id}
        )
        assert rating.competition_id is None
        assert await storage.get_competition_photo_ratings(photo.id, competition.id) == []

    @pytest.mark.asyncio
    async def test_average_of_nothing_is_none(self, storage, users):
        photo = await _photo(storage)
        assert await storage.get_photo_average_rating(photo.id) is None
        assert await storage.get_competition_photo_average_rating(photo.id, 1) is None
