"""
Durable storage on SQLAlchemy async sessions.

Each operation opens its own session and commits before returning. Cascades
are left to the foreign-key rules declared on the models (ON DELETE CASCADE /
SET NULL); the one reference without a foreign key, ``galleries.cover_photo_id``,
is cleared explicitly when a photo goes away.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

import structlog
from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from app.core.database import create_engine, create_session_factory, init_db
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
    Storage,
    rating_key,
)

log = structlog.get_logger()

M = TypeVar("M", bound=SQLModel)


class DatabaseStorage(Storage):
    backend = "database"

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory or create_session_factory(engine)

    @classmethod
    async def connect(
        cls, database_url: str, *, echo: bool = False, create_tables: bool = False
    ) -> "DatabaseStorage":
        engine = create_engine(database_url, echo=echo)
        if create_tables:
            await init_db(engine)
        log.info("storage.connected", backend=cls.backend, dialect=engine.dialect.name)
        return cls(engine)

    async def close(self) -> None:
        await self._engine.dispose()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get(self, model: type[M], key: Any) -> Optional[M]:
        async with self._session_factory() as session:
            return await session.get(model, key)

    async def _all(self, stmt) -> list:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def _pairs(self, stmt) -> list[tuple]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [tuple(row) for row in result.all()]

    async def _add(self, obj: M) -> M:
        async with self._session_factory() as session:
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
            return obj

    async def _update(self, model: type[M], key: Any, data: dict[str, Any]) -> Optional[M]:
        async with self._session_factory() as session:
            obj = await session.get(model, key)
            if obj is None:
                return None
            for field, value in data.items():
                setattr(obj, field, value)
            if hasattr(obj, "updated_at"):
                obj.updated_at = utcnow()
            session.add(obj)
            await session.commit()
            await session.refresh(obj)
            return obj

    async def _check_unique_user(
        self, session: AsyncSession, user_id: str, data: dict[str, Any]
    ) -> None:
        for field in UNIQUE_USER_FIELDS:
            value = data.get(field)
            if value is None:
                continue
            column = getattr(User, field)
            result = await session.execute(
                select(User.id).where(column == value, User.id != user_id).limit(1)
            )
            if result.first() is not None:
                raise DuplicateValueError(field, value)

    async def _write_user(
        self, user_id: str, data: dict[str, Any], *, create: bool
    ) -> Optional[User]:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if user is None:
                if not create:
                    return None
                user = User(id=user_id)
            await self._check_unique_user(session, user_id, data)
            for field, value in data.items():
                setattr(user, field, value)
            user.updated_at = utcnow()
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                # Lost a race with a concurrent writer; report which value clashed
                await session.rollback()
                await self._check_unique_user(session, user_id, data)
                raise
            await session.refresh(user)
            return user

    async def _delete(self, stmt) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    async def _execute(self, stmt) -> None:
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self._get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.username == username))
            return result.scalar_one_or_none()

    async def upsert_user(self, data: dict[str, Any]) -> User:
        fields = {k: v for k, v in data.items() if k != "id"}
        return await self._write_user(data["id"], fields, create=True)

    async def update_username(self, user_id: str, username: str) -> Optional[User]:
        return await self._write_user(user_id, {"username": username}, create=False)

    async def update_user_bio(self, user_id: str, bio: str) -> Optional[User]:
        return await self._update(User, user_id, {"bio": bio})

    async def delete_user(self, user_id: str) -> bool:
        async with self._session_factory() as session:
            owned_photos = select(Photo.id).where(Photo.user_id == user_id)
            await session.execute(
                update(Gallery)
                .where(Gallery.cover_photo_id.in_(owned_photos))
                .values(cover_photo_id=None)
            )
            result = await session.execute(delete(User).where(User.id == user_id))
            await session.commit()
            return result.rowcount > 0

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    async def create_organization(self, data: dict[str, Any], user_id: str) -> Organization:
        async with self._session_factory() as session:
            async with session.begin():
                organization = Organization(**data)
                session.add(organization)
                await session.flush()

                # Creator becomes admin in the same transaction
                session.add(
                    Membership(
                        user_id=user_id,
                        organization_id=organization.id,
                        is_admin=True,
                    )
                )
            await session.refresh(organization)
            return organization

    async def get_organization(self, organization_id: int) -> Optional[Organization]:
        return await self._get(Organization, organization_id)

    async def get_organizations(self) -> list[Organization]:
        return await self._all(select(Organization).order_by(Organization.name, Organization.id))

    async def get_organizations_by_user(self, user_id: str) -> list[Organization]:
        return await self._all(
            select(Organization)
            .join(Membership, Membership.organization_id == Organization.id)
            .where(Membership.user_id == user_id)
            .order_by(Organization.name, Organization.id)
        )

    async def update_organization(
        self, organization_id: int, data: dict[str, Any]
    ) -> Optional[Organization]:
        return await self._update(Organization, organization_id, data)

    async def delete_organization(self, organization_id: int) -> bool:
        return await self._delete(delete(Organization).where(Organization.id == organization_id))

    # ------------------------------------------------------------------
    # Memberships
    # ------------------------------------------------------------------

    async def add_user_to_organization(
        self, user_id: str, organization_id: int, is_admin: bool = False
    ) -> Membership:
        async with self._session_factory() as session:
            membership = await session.get(Membership, (user_id, organization_id))
            if membership is None:
                membership = Membership(
                    user_id=user_id,
                    organization_id=organization_id,
                    is_admin=is_admin,
                )
            else:
                membership.is_admin = is_admin
                membership.joined_at = utcnow()
            session.add(membership)
            await session.commit()
            await session.refresh(membership)
            return membership

    async def remove_user_from_organization(self, user_id: str, organization_id: int) -> bool:
        return await self._delete(
            delete(Membership).where(
                Membership.user_id == user_id,
                Membership.organization_id == organization_id,
            )
        )

    async def get_user_organization(
        self, user_id: str, organization_id: int
    ) -> Optional[Membership]:
        return await self._get(Membership, (user_id, organization_id))

    def _members_stmt(self, organization_id: int):
        return (
            select(Membership, User)
            .join(User, User.id == Membership.user_id)
            .where(Membership.organization_id == organization_id)
            .order_by(func.coalesce(User.username, ""), User.id)
        )

    async def get_organization_users(self, organization_id: int) -> list[tuple[Membership, User]]:
        return await self._pairs(self._members_stmt(organization_id))

    async def get_organization_admins(self, organization_id: int) -> list[tuple[Membership, User]]:
        return await self._pairs(
            self._members_stmt(organization_id).where(Membership.is_admin.is_(True))
        )

    async def is_user_organization_admin(self, user_id: str, organization_id: int) -> bool:
        membership = await self.get_user_organization(user_id, organization_id)
        return bool(membership and membership.is_admin)

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    async def create_photo(self, data: dict[str, Any]) -> Photo:
        return await self._add(Photo(**data, view_count=0))

    async def get_photo(self, photo_id: int) -> Optional[Photo]:
        return await self._get(Photo, photo_id)

    async def get_photos_by_user(self, user_id: str) -> list[Photo]:
        return await self._all(
            select(Photo)
            .where(Photo.user_id == user_id)
            .order_by(Photo.created_at.desc(), Photo.id.desc())
        )

    async def get_photos_by_gallery(self, gallery_id: int) -> list[Photo]:
        return await self._all(
            select(Photo)
            .where(Photo.gallery_id == gallery_id)
            .order_by(Photo.created_at.desc(), Photo.id.desc())
        )

    async def get_recent_photos(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[tuple[Photo, User]]:
        return await self._pairs(
            select(Photo, User)
            .join(User, User.id == Photo.user_id)
            .where(Photo.is_public.is_(True))
            .order_by(Photo.created_at.desc(), Photo.id.desc())
            .limit(limit)
        )

    async def update_photo(self, photo_id: int, data: dict[str, Any]) -> Optional[Photo]:
        return await self._update(Photo, photo_id, data)

    async def delete_photo(self, photo_id: int) -> bool:
        async with self._session_factory() as session:
            await session.execute(
                update(Gallery)
                .where(Gallery.cover_photo_id == photo_id)
                .values(cover_photo_id=None)
            )
            result = await session.execute(delete(Photo).where(Photo.id == photo_id))
            await session.commit()
            return result.rowcount > 0

    async def increment_photo_views(self, photo_id: int) -> None:
        await self._execute(
            update(Photo).where(Photo.id == photo_id).values(view_count=Photo.view_count + 1)
        )

    # ------------------------------------------------------------------
    # Galleries
    # ------------------------------------------------------------------

    async def create_gallery(self, data: dict[str, Any]) -> Gallery:
        return await self._add(Gallery(**data, view_count=0, like_count=0))

    async def get_gallery(self, gallery_id: int) -> Optional[Gallery]:
        return await self._get(Gallery, gallery_id)

    async def get_galleries_by_user(self, user_id: str) -> list[Gallery]:
        return await self._all(
            select(Gallery)
            .where(Gallery.user_id == user_id)
            .order_by(Gallery.created_at.desc(), Gallery.id.desc())
        )

    async def update_gallery(self, gallery_id: int, data: dict[str, Any]) -> Optional[Gallery]:
        return await self._update(Gallery, gallery_id, data)

    async def delete_gallery(self, gallery_id: int) -> bool:
        return await self._delete(delete(Gallery).where(Gallery.id == gallery_id))

    async def increment_gallery_views(self, gallery_id: int) -> None:
        await self._execute(
            update(Gallery)
            .where(Gallery.id == gallery_id)
            .values(view_count=Gallery.view_count + 1)
        )

    async def increment_gallery_likes(self, gallery_id: int) -> None:
        await self._execute(
            update(Gallery)
            .where(Gallery.id == gallery_id)
            .values(like_count=Gallery.like_count + 1)
        )

    # ------------------------------------------------------------------
    # Competitions
    # ------------------------------------------------------------------

    async def create_competition(self, data: dict[str, Any]) -> Competition:
        return await self._add(Competition(**data))

    async def get_competition(self, competition_id: int) -> Optional[Competition]:
        return await self._get(Competition, competition_id)

    async def get_competitions_by_organization(self, organization_id: int) -> list[Competition]:
        return await self._all(
            select(Competition)
            .where(Competition.organization_id == organization_id)
            .order_by(Competition.created_at.desc(), Competition.id.desc())
        )

    async def get_active_competitions(self) -> list[Competition]:
        return await self._all(
            select(Competition)
            .where(Competition.is_active.is_(True))
            .order_by(Competition.created_at.desc(), Competition.id.desc())
        )

    async def update_competition(
        self, competition_id: int, data: dict[str, Any]
    ) -> Optional[Competition]:
        return await self._update(Competition, competition_id, data)

    async def delete_competition(self, competition_id: int) -> bool:
        return await self._delete(delete(Competition).where(Competition.id == competition_id))

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    async def add_photo_to_competition(self, competition_id: int, photo_id: int) -> Submission:
        async with self._session_factory() as session:
            submission = await session.get(Submission, (competition_id, photo_id))
            if submission is None:
                submission = Submission(competition_id=competition_id, photo_id=photo_id)
            else:
                submission.submitted_at = utcnow()
            session.add(submission)
            await session.commit()
            await session.refresh(submission)
            return submission

    async def remove_photo_from_competition(self, competition_id: int, photo_id: int) -> bool:
        return await self._delete(
            delete(Submission).where(
                Submission.competition_id == competition_id,
                Submission.photo_id == photo_id,
            )
        )

    async def get_competition_photos(self, competition_id: int) -> list[tuple[Submission, Photo]]:
        return await self._pairs(
            select(Submission, Photo)
            .join(Photo, Photo.id == Submission.photo_id)
            .where(Submission.competition_id == competition_id)
            .order_by(Submission.submitted_at.desc(), Submission.photo_id.desc())
        )

    async def is_photo_in_competition(self, photo_id: int, competition_id: int) -> bool:
        return await self._get(Submission, (competition_id, photo_id)) is not None

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------

    @staticmethod
    def _context_filter(stmt, photo_id: int, competition_id: Optional[int]):
        stmt = stmt.where(Rating.photo_id == photo_id)
        if competition_id is None:
            return stmt.where(
                Rating.is_competition_rating.is_(False),
                Rating.competition_id.is_(None),
            )
        return stmt.where(
            Rating.is_competition_rating.is_(True),
            Rating.competition_id == competition_id,
        )

    async def rate_photo(self, data: dict[str, Any]) -> Rating:
        key = rating_key(data)
        async with self._session_factory() as session:
            stmt = self._context_filter(select(Rating), key.photo_id, key.competition_id)
            result = await session.execute(stmt.where(Rating.user_id == key.user_id))
            rating = result.scalar_one_or_none()
            if rating is None:
                rating = Rating(
                    photo_id=key.photo_id,
                    user_id=key.user_id,
                    rating=data["rating"],
                    is_competition_rating=key.is_competition_rating,
                    competition_id=key.competition_id,
                )
            else:
                rating.rating = data["rating"]
                rating.updated_at = utcnow()
            session.add(rating)
            await session.commit()
            await session.refresh(rating)
            return rating

    async def get_photo_rating(
        self,
        photo_id: int,
        user_id: str,
        is_competition_rating: bool,
        competition_id: Optional[int] = None,
    ) -> Optional[Rating]:
        context = competition_id if is_competition_rating else None
        if is_competition_rating and context is None:
            return None
        stmt = self._context_filter(select(Rating), photo_id, context)
        async with self._session_factory() as session:
            result = await session.execute(stmt.where(Rating.user_id == user_id))
            return result.scalar_one_or_none()

    async def _average(self, photo_id: int, competition_id: Optional[int]) -> Optional[float]:
        stmt = self._context_filter(select(func.avg(Rating.rating)), photo_id, competition_id)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            avg = result.scalar_one_or_none()
            return float(avg) if avg is not None else None

    async def get_photo_ratings(self, photo_id: int) -> list[Rating]:
        return await self._all(
            self._context_filter(select(Rating), photo_id, None).order_by(Rating.id)
        )

    async def get_photo_average_rating(self, photo_id: int) -> Optional[float]:
        return await self._average(photo_id, None)

    async def get_competition_photo_ratings(
        self, photo_id: int, competition_id: int
    ) -> list[Rating]:
        return await self._all(
            self._context_filter(select(Rating), photo_id, competition_id).order_by(Rating.id)
        )

    async def get_competition_photo_average_rating(
        self, photo_id: int, competition_id: int
    ) -> Optional[float]:
        return await self._average(photo_id, competition_id)
