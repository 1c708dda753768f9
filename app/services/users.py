"""
User profile service — first-login provisioning, profile edits, stats.
"""

from __future__ import annotations

from typing import Any

import structlog

from app.core.errors import NotFoundError, ValidationError
from app.models import User
from app.storage import DuplicateValueError, Storage

from shutterclub_shared.schemas.users import UserStatsResponse

log = structlog.get_logger()

# Claims copied onto the user record on every login
PROFILE_CLAIMS = ("email", "first_name", "last_name", "profile_image_url")


async def get_user(storage: Storage, user_id: str) -> User:
    user = await storage.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def ensure_user(storage: Storage, user_id: str, claims: dict[str, Any]) -> User:
    """Create the user on first sight, refresh profile claims afterwards.

    Claims absent from the token leave the stored value alone, so profile
    fields a user edited here are never blanked by a sparse token.
    An email claim already held by another user is dropped rather than
    failing the login.
    """
    data: dict[str, Any] = {"id": user_id}
    data.update({k: claims[k] for k in PROFILE_CLAIMS if claims.get(k) is not None})

    existing = await storage.get_user(user_id)
    if existing is not None and all(getattr(existing, k) == v for k, v in data.items()):
        return existing

    try:
        user = await storage.upsert_user(data)
    except DuplicateValueError as exc:
        if exc.field != "email":
            raise
        log.warning("user.email_conflict", user_id=user_id, email=exc.value)
        del data["email"]
        user = await storage.upsert_user(data)
    log.info("user.upserted", user_id=user_id, created=existing is None)
    return user


async def update_username(storage: Storage, user_id: str, username: str) -> User:
    try:
        user = await storage.update_username(user_id, username)
    except DuplicateValueError:
        raise ValidationError(
            "Username is already taken",
            fields={"username": ["Username is already taken"]},
        )
    if user is None:
        raise NotFoundError("User not found")
    log.info("user.username_updated", user_id=user_id, username=username)
    return user


async def update_bio(storage: Storage, user_id: str, bio: str) -> User:
    user = await storage.update_user_bio(user_id, bio)
    if user is None:
        raise NotFoundError("User not found")
    log.info("user.bio_updated", user_id=user_id)
    return user


async def get_user_stats(storage: Storage, user_id: str) -> UserStatsResponse:
    """Counts shown on a profile page; an unknown user simply has none."""
    photos = await storage.get_photos_by_user(user_id)
    galleries = await storage.get_galleries_by_user(user_id)
    organizations = await storage.get_organizations_by_user(user_id)

    org_ids = {org.id for org in organizations}
    active = await storage.get_active_competitions()

    return UserStatsResponse(
        photo_count=len(photos),
        gallery_count=len(galleries),
        organization_count=len(organizations),
        competition_count=sum(1 for c in active if c.organization_id in org_ids),
    )
