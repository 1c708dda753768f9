"""
Storage interface shared by the durable and in-memory backings.

Contract:
- lookups return the entity or ``None``; nothing here raises for "not found"
- updates on unknown ids return ``None``, deletes return ``False``
- listings are deterministically ordered (see each method)
- composite keys are explicit tuples (see ``MembershipKey`` and friends)
- user writes that clash on email or username raise ``DuplicateValueError``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Optional

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

DEFAULT_RECENT_LIMIT = 20

# User columns that no two users may share
UNIQUE_USER_FIELDS = ("email", "username")


class DuplicateValueError(Exception):
    """A write would give a user an email or username another user already holds."""

    def __init__(self, field: str, value: Any):
        super().__init__(f"{field} {value!r} is already taken")
        self.field = field
        self.value = value


class MembershipKey(NamedTuple):
    user_id: str
    organization_id: int


class SubmissionKey(NamedTuple):
    competition_id: int
    photo_id: int


class RatingKey(NamedTuple):
    photo_id: int
    user_id: str
    is_competition_rating: bool
    competition_id: Optional[int]


def rating_key(data: dict[str, Any]) -> RatingKey:
    """Build the uniqueness key for a rating write; general ratings never carry a competition."""
    is_competition = bool(data.get("is_competition_rating", False))
    return RatingKey(
        photo_id=data["photo_id"],
        user_id=data["user_id"],
        is_competition_rating=is_competition,
        competition_id=data.get("competition_id") if is_competition else None,
    )


def average(values: list[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


class Storage(ABC):
    """CRUD contract for every entity of the platform."""

    backend: str = "abstract"

    async def close(self) -> None:
        """Release backing resources."""

    # -- Users --------------------------------------------------------------

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    async def upsert_user(self, data: dict[str, Any]) -> User:
        """Insert the user or overwrite the supplied fields; ``created_at`` is preserved.

        Raises ``DuplicateValueError`` when email or username belongs to another user.
        """

    @abstractmethod
    async def update_username(self, user_id: str, username: str) -> Optional[User]:
        """Raises ``DuplicateValueError`` when another user holds *username*."""

    @abstractmethod
    async def update_user_bio(self, user_id: str, bio: str) -> Optional[User]: ...

    @abstractmethod
    async def delete_user(self, user_id: str) -> bool:
        """Delete the user together with memberships, photos, galleries and ratings."""

    # -- Organizations ------------------------------------------------------

    @abstractmethod
    async def create_organization(self, data: dict[str, Any], user_id: str) -> Organization:
        """Create the organization and make *user_id* its admin, atomically."""

    @abstractmethod
    async def get_organization(self, organization_id: int) -> Optional[Organization]: ...

    @abstractmethod
    async def get_organizations(self) -> list[Organization]:
        """All organizations, by name ascending."""

    @abstractmethod
    async def get_organizations_by_user(self, user_id: str) -> list[Organization]:
        """Organizations *user_id* belongs to, by name ascending."""

    @abstractmethod
    async def update_organization(
        self, organization_id: int, data: dict[str, Any]
    ) -> Optional[Organization]: ...

    @abstractmethod
    async def delete_organization(self, organization_id: int) -> bool:
        """Delete the organization, its memberships and its competitions."""

    # -- Memberships --------------------------------------------------------

    @abstractmethod
    async def add_user_to_organization(
        self, user_id: str, organization_id: int, is_admin: bool = False
    ) -> Membership:
        """Upsert: re-adding an existing member overwrites the role."""

    @abstractmethod
    async def remove_user_from_organization(self, user_id: str, organization_id: int) -> bool: ...

    @abstractmethod
    async def get_user_organization(
        self, user_id: str, organization_id: int
    ) -> Optional[Membership]: ...

    @abstractmethod
    async def get_organization_users(self, organization_id: int) -> list[tuple[Membership, User]]:
        """Members with their user record, by username ascending."""

    @abstractmethod
    async def get_organization_admins(self, organization_id: int) -> list[tuple[Membership, User]]:
        """Admin members with their user record, by username ascending."""

    @abstractmethod
    async def is_user_organization_admin(self, user_id: str, organization_id: int) -> bool: ...

    # -- Photos -------------------------------------------------------------

    @abstractmethod
    async def create_photo(self, data: dict[str, Any]) -> Photo: ...

    @abstractmethod
    async def get_photo(self, photo_id: int) -> Optional[Photo]: ...

    @abstractmethod
    async def get_photos_by_user(self, user_id: str) -> list[Photo]:
        """Newest first."""

    @abstractmethod
    async def get_photos_by_gallery(self, gallery_id: int) -> list[Photo]:
        """Newest first."""

    @abstractmethod
    async def get_recent_photos(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[tuple[Photo, User]]:
        """Public photos with their owner, newest first, at most *limit*."""

    @abstractmethod
    async def update_photo(self, photo_id: int, data: dict[str, Any]) -> Optional[Photo]: ...

    @abstractmethod
    async def delete_photo(self, photo_id: int) -> bool:
        """Delete the photo, its submissions and its ratings; clear it as a gallery cover."""

    @abstractmethod
    async def increment_photo_views(self, photo_id: int) -> None: ...

    # -- Galleries ----------------------------------------------------------

    @abstractmethod
    async def create_gallery(self, data: dict[str, Any]) -> Gallery: ...

    @abstractmethod
    async def get_gallery(self, gallery_id: int) -> Optional[Gallery]: ...

    @abstractmethod
    async def get_galleries_by_user(self, user_id: str) -> list[Gallery]:
        """Newest first."""

    @abstractmethod
    async def update_gallery(self, gallery_id: int, data: dict[str, Any]) -> Optional[Gallery]: ...

    @abstractmethod
    async def delete_gallery(self, gallery_id: int) -> bool:
        """Delete the gallery; its photos survive with ``gallery_id = None``."""

    @abstractmethod
    async def increment_gallery_views(self, gallery_id: int) -> None: ...

    @abstractmethod
    async def increment_gallery_likes(self, gallery_id: int) -> None: ...

    # -- Competitions -------------------------------------------------------

    @abstractmethod
    async def create_competition(self, data: dict[str, Any]) -> Competition: ...

    @abstractmethod
    async def get_competition(self, competition_id: int) -> Optional[Competition]: ...

    @abstractmethod
    async def get_competitions_by_organization(self, organization_id: int) -> list[Competition]:
        """Newest first."""

    @abstractmethod
    async def get_active_competitions(self) -> list[Competition]:
        """Competitions with ``is_active``, newest first."""

    @abstractmethod
    async def update_competition(
        self, competition_id: int, data: dict[str, Any]
    ) -> Optional[Competition]: ...

    @abstractmethod
    async def delete_competition(self, competition_id: int) -> bool:
        """Delete the competition, its submissions and its competition ratings."""

    # -- Submissions --------------------------------------------------------

    @abstractmethod
    async def add_photo_to_competition(self, competition_id: int, photo_id: int) -> Submission:
        """Upsert: re-submitting refreshes ``submitted_at``."""

    @abstractmethod
    async def remove_photo_from_competition(self, competition_id: int, photo_id: int) -> bool: ...

    @abstractmethod
    async def get_competition_photos(self, competition_id: int) -> list[tuple[Submission, Photo]]:
        """Submissions with their photo, most recently submitted first."""

    @abstractmethod
    async def is_photo_in_competition(self, photo_id: int, competition_id: int) -> bool: ...

    # -- Ratings ------------------------------------------------------------

    @abstractmethod
    async def rate_photo(self, data: dict[str, Any]) -> Rating:
        """Upsert keyed by (photo_id, user_id, is_competition_rating, competition_id)."""

    @abstractmethod
    async def get_photo_rating(
        self,
        photo_id: int,
        user_id: str,
        is_competition_rating: bool,
        competition_id: Optional[int] = None,
    ) -> Optional[Rating]: ...

    @abstractmethod
    async def get_photo_ratings(self, photo_id: int) -> list[Rating]:
        """General-context ratings of the photo."""

    @abstractmethod
    async def get_photo_average_rating(self, photo_id: int) -> Optional[float]:
        """Mean of general-context ratings, ``None`` when unrated."""

    @abstractmethod
    async def get_competition_photo_ratings(
        self, photo_id: int, competition_id: int
    ) -> list[Rating]: ...

    @abstractmethod
    async def get_competition_photo_average_rating(
        self, photo_id: int, competition_id: int
    ) -> Optional[float]:
        """Mean of the competition-context ratings, ``None`` when unrated."""
