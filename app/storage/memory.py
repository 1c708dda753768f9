"""
In-memory storage for environments without a configured database.

Records live in plain dicts keyed by id or by an explicit composite key.
Callers always receive copies, so mutating a returned entity never changes
the store. Cascades that the durable backing gets from foreign keys are
spelled out as cleanup steps here.

No method awaits between reading and writing its maps, so every operation is
atomic with respect to other coroutines on the same event loop. The store is
not safe to share across threads.
"""

from __future__ import annotations

import itertools
from typing import Any, Optional, TypeVar

from sqlmodel import SQLModel

from app.models import (
    Competition,
    Gallery,
    Membership,
    Organization,
    Photo,
    Rating,
    Submission,
    User,
)
from app.models.base import utcnow

from .base import (
    DEFAULT_RECENT_LIMIT,
    UNIQUE_USER_FIELDS,
    DuplicateValueError,
    MembershipKey,
    RatingKey,
    Storage,
    SubmissionKey,
    average,
    rating_key,
)

M = TypeVar("M", bound=SQLModel)


def _copy(obj: M) -> M:
    return type(obj).model_validate(obj.model_dump())


def _newest_first(items):
    return sorted(items, key=lambda item: (item.created_at, item.id), reverse=True)


def _by_username(pairs: list[tuple[Membership, User]]) -> list[tuple[Membership, User]]:
    return sorted(pairs, key=lambda pair: (pair[1].username or "", pair[1].id))


class MemoryStorage(Storage):
    backend = "memory"

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._organizations: dict[int, Organization] = {}
        self._memberships: dict[MembershipKey, Membership] = {}
        self._photos: dict[int, Photo] = {}
        self._galleries: dict[int, Gallery] = {}
        self._competitions: dict[int, Competition] = {}
        self._submissions: dict[SubmissionKey, Submission] = {}
        self._ratings: dict[RatingKey, Rating] = {}

        self._org_ids = itertools.count(1)
        self._photo_ids = itertools.count(1)
        self._gallery_ids = itertools.count(1)
        self._competition_ids = itertools.count(1)
        self._rating_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _apply(obj: M, data: dict[str, Any]) -> M:
        for field, value in data.items():
            setattr(obj, field, value)
        if hasattr(obj, "updated_at"):
            obj.updated_at = utcnow()
        return obj

    def _check_unique_user(self, user_id: str, data: dict[str, Any]) -> None:
        for field in UNIQUE_USER_FIELDS:
            value = data.get(field)
            if value is None:
                continue
            for other in self._users.values():
                if other.id != user_id and getattr(other, field) == value:
                    raise DuplicateValueError(field, value)

    def _drop_photo_dependents(self, photo_id: int) -> None:
        self._submissions = {
            key: sub for key, sub in self._submissions.items() if key.photo_id != photo_id
        }
        self._ratings = {
            key: r for key, r in self._ratings.items() if key.photo_id != photo_id
        }
        for gallery in self._galleries.values():
            if gallery.cover_photo_id == photo_id:
                gallery.cover_photo_id = None

    def _drop_competition_dependents(self, competition_id: int) -> None:
        self._submissions = {
            key: sub
            for key, sub in self._submissions.items()
            if key.competition_id != competition_id
        }
        self._ratings = {
            key: r for key, r in self._ratings.items() if key.competition_id != competition_id
        }

    def _detach_gallery_photos(self, gallery_id: int) -> None:
        for photo in self._photos.values():
            if photo.gallery_id == gallery_id:
                photo.gallery_id = None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return _copy(user) if user else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self._users.values():
            if user.username == username:
                return _copy(user)
        return None

    async def upsert_user(self, data: dict[str, Any]) -> User:
        self._check_unique_user(data["id"], data)
        existing = self._users.get(data["id"])
        if existing is not None:
            fields = {k: v for k, v in data.items() if k != "id"}
            return _copy(self._apply(existing, fields))

        user = User(**data)
        self._users[user.id] = user
        return _copy(user)

    async def update_username(self, user_id: str, username: str) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        self._check_unique_user(user_id, {"username": username})
        return _copy(self._apply(user, {"username": username}))

    async def update_user_bio(self, user_id: str, bio: str) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None
        return _copy(self._apply(user, {"bio": bio}))

    async def delete_user(self, user_id: str) -> bool:
        if self._users.pop(user_id, None) is None:
            return False

        self._memberships = {
            key: m for key, m in self._memberships.items() if key.user_id != user_id
        }
        self._ratings = {key: r for key, r in self._ratings.items() if key.user_id != user_id}

        for gallery_id in [g.id for g in self._galleries.values() if g.user_id == user_id]:
            del self._galleries[gallery_id]
            self._detach_gallery_photos(gallery_id)

        for photo_id in [p.id for p in self._photos.values() if p.user_id == user_id]:
            del self._photos[photo_id]
            self._drop_photo_dependents(photo_id)
        return True

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    async def create_organization(self, data: dict[str, Any], user_id: str) -> Organization:
        organization = Organization(**data, id=next(self._org_ids))
        membership = Membership(
            user_id=user_id,
            organization_id=organization.id,
            is_admin=True,
        )
        self._organizations[organization.id] = organization
        self._memberships[MembershipKey(user_id, organization.id)] = membership
        return _copy(organization)

    async def get_organization(self, organization_id: int) -> Optional[Organization]:
        org = self._organizations.get(organization_id)
        return _copy(org) if org else None

    async def get_organizations(self) -> list[Organization]:
        orgs = sorted(self._organizations.values(), key=lambda o: (o.name, o.id))
        return [_copy(o) for o in orgs]

    async def get_organizations_by_user(self, user_id: str) -> list[Organization]:
        org_ids = {key.organization_id for key in self._memberships if key.user_id == user_id}
        orgs = sorted(
            (o for o in self._organizations.values() if o.id in org_ids),
            key=lambda o: (o.name, o.id),
        )
        return [_copy(o) for o in orgs]

    async def update_organization(
        self, organization_id: int, data: dict[str, Any]
    ) -> Optional[Organization]:
        org = self._organizations.get(organization_id)
        if org is None:
            return None
        return _copy(self._apply(org, data))

    async def delete_organization(self, organization_id: int) -> bool:
        if self._organizations.pop(organization_id, None) is None:
            return False

        self._memberships = {
            key: m
            for key, m in self._memberships.items()
            if key.organization_id != organization_id
        }
        for competition_id in [
            c.id for c in self._competitions.values() if c.organization_id == organization_id
        ]:
            del self._competitions[competition_id]
            self._drop_competition_dependents(competition_id)
        return True

    # ------------------------------------------------------------------
    # Memberships
    # ------------------------------------------------------------------

    async def add_user_to_organization(
        self, user_id: str, organization_id: int, is_admin: bool = False
    ) -> Membership:
        membership = Membership(
            user_id=user_id,
            organization_id=organization_id,
            is_admin=is_admin,
        )
        self._memberships[MembershipKey(user_id, organization_id)] = membership
        return _copy(membership)

    async def remove_user_from_organization(self, user_id: str, organization_id: int) -> bool:
        return self._memberships.pop(MembershipKey(user_id, organization_id), None) is not None

    async def get_user_organization(
        self, user_id: str, organization_id: int
    ) -> Optional[Membership]:
        membership = self._memberships.get(MembershipKey(user_id, organization_id))
        return _copy(membership) if membership else None

    def _members(self, organization_id: int, admins_only: bool) -> list[tuple[Membership, User]]:
        pairs = []
        for key, membership in self._memberships.items():
            if key.organization_id != organization_id:
                continue
            if admins_only and not membership.is_admin:
                continue
            user = self._users.get(key.user_id)
            if user is None:
                continue
            pairs.append((_copy(membership), _copy(user)))
        return _by_username(pairs)

    async def get_organization_users(self, organization_id: int) -> list[tuple[Membership, User]]:
        return self._members(organization_id, admins_only=False)

    async def get_organization_admins(self, organization_id: int) -> list[tuple[Membership, User]]:
        return self._members(organization_id, admins_only=True)

    async def is_user_organization_admin(self, user_id: str, organization_id: int) -> bool:
        membership = self._memberships.get(MembershipKey(user_id, organization_id))
        return bool(membership and membership.is_admin)

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    async def create_photo(self, data: dict[str, Any]) -> Photo:
        photo = Photo(**data, id=next(self._photo_ids), view_count=0)
        self._photos[photo.id] = photo
        return _copy(photo)

    async def get_photo(self, photo_id: int) -> Optional[Photo]:
        photo = self._photos.get(photo_id)
        return _copy(photo) if photo else None

    async def get_photos_by_user(self, user_id: str) -> list[Photo]:
        photos = [p for p in self._photos.values() if p.user_id == user_id]
        return [_copy(p) for p in _newest_first(photos)]

    async def get_photos_by_gallery(self, gallery_id: int) -> list[Photo]:
        photos = [p for p in self._photos.values() if p.gallery_id == gallery_id]
        return [_copy(p) for p in _newest_first(photos)]

    async def get_recent_photos(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[tuple[Photo, User]]:
        photos = [
            p for p in self._photos.values() if p.is_public and p.user_id in self._users
        ]
        return [
            (_copy(p), _copy(self._users[p.user_id]))
            for p in _newest_first(photos)[:limit]
        ]

    async def update_photo(self, photo_id: int, data: dict[str, Any]) -> Optional[Photo]:
        photo = self._photos.get(photo_id)
        if photo is None:
            return None
        return _copy(self._apply(photo, data))

    async def delete_photo(self, photo_id: int) -> bool:
        if self._photos.pop(photo_id, None) is None:
            return False
        self._drop_photo_dependents(photo_id)
        return True

    async def increment_photo_views(self, photo_id: int) -> None:
        photo = self._photos.get(photo_id)
        if photo is not None:
            photo.view_count = (photo.view_count or 0) + 1

    # ------------------------------------------------------------------
    # Galleries
    # ------------------------------------------------------------------

    async def create_gallery(self, data: dict[str, Any]) -> Gallery:
        gallery = Gallery(**data, id=next(self._gallery_ids), view_count=0, like_count=0)
        self._galleries[gallery.id] = gallery
        return _copy(gallery)

    async def get_gallery(self, gallery_id: int) -> Optional[Gallery]:
        gallery = self._galleries.get(gallery_id)
        return _copy(gallery) if gallery else None

    async def get_galleries_by_user(self, user_id: str) -> list[Gallery]:
        galleries = [g for g in self._galleries.values() if g.user_id == user_id]
        return [_copy(g) for g in _newest_first(galleries)]

    async def update_gallery(self, gallery_id: int, data: dict[str, Any]) -> Optional[Gallery]:
        gallery = self._galleries.get(gallery_id)
        if gallery is None:
            return None
        return _copy(self._apply(gallery, data))

    async def delete_gallery(self, gallery_id: int) -> bool:
        if self._galleries.pop(gallery_id, None) is None:
            return False
        self._detach_gallery_photos(gallery_id)
        return True

    async def increment_gallery_views(self, gallery_id: int) -> None:
        gallery = self._galleries.get(gallery_id)
        if gallery is not None:
            gallery.view_count = (gallery.view_count or 0) + 1

    async def increment_gallery_likes(self, gallery_id: int) -> None:
        gallery = self._galleries.get(gallery_id)
        if gallery is not None:
            gallery.like_count = (gallery.like_count or 0) + 1

    # ------------------------------------------------------------------
    # Competitions
    # ------------------------------------------------------------------

    async def create_competition(self, data: dict[str, Any]) -> Competition:
        competition = Competition(**data, id=next(self._competition_ids))
        self._competitions[competition.id] = competition
        return _copy(competition)

    async def get_competition(self, competition_id: int) -> Optional[Competition]:
        competition = self._competitions.get(competition_id)
        return _copy(competition) if competition else None

    async def get_competitions_by_organization(self, organization_id: int) -> list[Competition]:
        competitions = [
            c for c in self._competitions.values() if c.organization_id == organization_id
        ]
        return [_copy(c) for c in _newest_first(competitions)]

    async def get_active_competitions(self) -> list[Competition]:
        competitions = [c for c in self._competitions.values() if c.is_active]
        return [_copy(c) for c in _newest_first(competitions)]

    async def update_competition(
        self, competition_id: int, data: dict[str, Any]
    ) -> Optional[Competition]:
        competition = self._competitions.get(competition_id)
        if competition is None:
            return None
        return _copy(self._apply(competition, data))

    async def delete_competition(self, competition_id: int) -> bool:
        if self._competitions.pop(competition_id, None) is None:
            return False
        self._drop_competition_dependents(competition_id)
        return True

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    async def add_photo_to_competition(self, competition_id: int, photo_id: int) -> Submission:
        submission = Submission(competition_id=competition_id, photo_id=photo_id)
        self._submissions[SubmissionKey(competition_id, photo_id)] = submission
        return _copy(submission)

    async def remove_photo_from_competition(self, competition_id: int, photo_id: int) -> bool:
        key = SubmissionKey(competition_id, photo_id)
        return self._submissions.pop(key, None) is not None

    async def get_competition_photos(self, competition_id: int) -> list[tuple[Submission, Photo]]:
        pairs = [
            (sub, self._photos[key.photo_id])
            for key, sub in self._submissions.items()
            if key.competition_id == competition_id and key.photo_id in self._photos
        ]
        pairs.sort(key=lambda pair: (pair[0].submitted_at, pair[0].photo_id), reverse=True)
        return [(_copy(sub), _copy(photo)) for sub, photo in pairs]

    async def is_photo_in_competition(self, photo_id: int, competition_id: int) -> bool:
        return SubmissionKey(competition_id, photo_id) in self._submissions

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------

    async def rate_photo(self, data: dict[str, Any]) -> Rating:
        key = rating_key(data)
        existing = self._ratings.get(key)
        if existing is not None:
            return _copy(self._apply(existing, {"rating": data["rating"]}))

        rating = Rating(
            id=next(self._rating_ids),
            photo_id=key.photo_id,
            user_id=key.user_id,
            rating=data["rating"],
            is_competition_rating=key.is_competition_rating,
            competition_id=key.competition_id,
        )
        self._ratings[key] = rating
        return _copy(rating)

    async def get_photo_rating(
        self,
        photo_id: int,
        user_id: str,
        is_competition_rating: bool,
        competition_id: Optional[int] = None,
    ) -> Optional[Rating]:
        key = rating_key(
            {
                "photo_id": photo_id,
                "user_id": user_id,
                "is_competition_rating": is_competition_rating,
                "competition_id": competition_id,
            }
        )
        rating = self._ratings.get(key)
        return _copy(rating) if rating else None

    def _ratings_for(self, photo_id: int, competition_id: Optional[int]) -> list[Rating]:
        ratings = [
            r
            for key, r in self._ratings.items()
            if key.photo_id == photo_id
            and key.is_competition_rating == (competition_id is not None)
            and key.competition_id == competition_id
        ]
        return sorted(ratings, key=lambda r: r.id)

    async def get_photo_ratings(self, photo_id: int) -> list[Rating]:
        return [_copy(r) for r in self._ratings_for(photo_id, None)]

    async def get_photo_average_rating(self, photo_id: int) -> Optional[float]:
        return average([r.rating for r in self._ratings_for(photo_id, None)])

    async def get_competition_photo_ratings(
        self, photo_id: int, competition_id: int
    ) -> list[Rating]:
        return [_copy(r) for r in self._ratings_for(photo_id, competition_id)]

    async def get_competition_photo_average_rating(
        self, photo_id: int, competition_id: int
    ) -> Optional[float]:
        return average([r.rating for r in self._ratings_for(photo_id, competition_id)])
