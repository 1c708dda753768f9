"""
Photo and gallery service — ownership, visibility and view counting.

Non-public photos and galleries are only visible to their owner; everybody
else gets the same 404 as for an id that does not exist.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from app.core.errors import AuthorizationError, NotFoundError
from app.models import Gallery, Photo, User
from app.storage import Storage

from shutterclub_shared.schemas.galleries import GalleryCreateRequest, GalleryUpdateRequest
from shutterclub_shared.schemas.photos import PhotoCreateRequest, PhotoUpdateRequest

log = structlog.get_logger()


def _visible(item: Photo | Gallery, viewer_id: Optional[str]) -> bool:
    return item.is_public or item.user_id == viewer_id


async def _owned_gallery(storage: Storage, gallery_id: int, user_id: str) -> Gallery:
    gallery = await storage.get_gallery(gallery_id)
    if gallery is None:
        raise NotFoundError("Gallery not found")
    if gallery.user_id != user_id:
        raise AuthorizationError("You can only modify your own galleries")
    return gallery


async def _owned_photo(storage: Storage, photo_id: int, user_id: str) -> Photo:
    photo = await storage.get_photo(photo_id)
    if photo is None:
        raise NotFoundError("Photo not found")
    if photo.user_id != user_id:
        raise AuthorizationError("You can only modify your own photos")
    return photo


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------

async def create_photo(storage: Storage, req: PhotoCreateRequest, user_id: str) -> Photo:
    if req.gallery_id is not None:
        await _owned_gallery(storage, req.gallery_id, user_id)

    photo = await storage.create_photo({**req.model_dump(), "user_id": user_id})
    log.info("photo.created", photo_id=photo.id, user_id=user_id, gallery_id=photo.gallery_id)
    return photo


async def view_photo(storage: Storage, photo_id: int, viewer_id: Optional[str]) -> Photo:
    """Fetch a photo for display and count the view."""
    photo = await storage.get_photo(photo_id)
    if photo is None or not _visible(photo, viewer_id):
        raise NotFoundError("Photo not found")

    await storage.increment_photo_views(photo_id)
    photo.view_count += 1
    return photo


async def list_user_photos(
    storage: Storage, owner_id: str, viewer_id: Optional[str]
) -> list[Photo]:
    photos = await storage.get_photos_by_user(owner_id)
    return [p for p in photos if _visible(p, viewer_id)]


async def recent_photos(storage: Storage, limit: int) -> list[tuple[Photo, User]]:
    return await storage.get_recent_photos(limit)


async def update_photo(
    storage: Storage, photo_id: int, req: PhotoUpdateRequest, user_id: str
) -> Photo:
    await _owned_photo(storage, photo_id, user_id)

    changes: dict[str, Any] = req.changes()
    if changes.get("gallery_id") is not None:
        await _owned_gallery(storage, changes["gallery_id"], user_id)

    photo = await storage.update_photo(photo_id, changes)
    if photo is None:
        raise NotFoundError("Photo not found")
    log.info("photo.updated", photo_id=photo_id, fields=sorted(changes))
    return photo


async def delete_photo(storage: Storage, photo_id: int, user_id: str) -> None:
    """Delete a photo; its submissions and ratings go with it."""
    await _owned_photo(storage, photo_id, user_id)
    if not await storage.delete_photo(photo_id):
        raise NotFoundError("Photo not found")
    log.info("photo.deleted", photo_id=photo_id, user_id=user_id)


# ---------------------------------------------------------------------------
# Galleries
# ---------------------------------------------------------------------------

async def create_gallery(storage: Storage, req: GalleryCreateRequest, user_id: str) -> Gallery:
    if req.cover_photo_id is not None:
        await _owned_photo(storage, req.cover_photo_id, user_id)

    gallery = await storage.create_gallery({**req.model_dump(), "user_id": user_id})
    log.info("gallery.created", gallery_id=gallery.id, user_id=user_id)
    return gallery


async def get_visible_gallery(
    storage: Storage, gallery_id: int, viewer_id: Optional[str]
) -> Gallery:
    gallery = await storage.get_gallery(gallery_id)
    if gallery is None or not _visible(gallery, viewer_id):
        raise NotFoundError("Gallery not found")
    return gallery


async def view_gallery(storage: Storage, gallery_id: int, viewer_id: Optional[str]) -> Gallery:
    """Fetch a gallery for display and count the view."""
    gallery = await get_visible_gallery(storage, gallery_id, viewer_id)
    await storage.increment_gallery_views(gallery_id)
    gallery.view_count += 1
    return gallery


async def like_gallery(storage: Storage, gallery_id: int, viewer_id: Optional[str]) -> Gallery:
    await get_visible_gallery(storage, gallery_id, viewer_id)
    await storage.increment_gallery_likes(gallery_id)
    log.info("gallery.liked", gallery_id=gallery_id, user_id=viewer_id)
    return await get_visible_gallery(storage, gallery_id, viewer_id)


async def list_gallery_photos(
    storage: Storage, gallery_id: int, viewer_id: Optional[str]
) -> list[Photo]:
    await get_visible_gallery(storage, gallery_id, viewer_id)
    photos = await storage.get_photos_by_gallery(gallery_id)
    return [p for p in photos if _visible(p, viewer_id)]


async def list_user_galleries(
    storage: Storage, owner_id: str, viewer_id: Optional[str]
) -> list[Gallery]:
    galleries = await storage.get_galleries_by_user(owner_id)
    return [g for g in galleries if _visible(g, viewer_id)]


async def update_gallery(
    storage: Storage, gallery_id: int, req: GalleryUpdateRequest, user_id: str
) -> Gallery:
    await _owned_gallery(storage, gallery_id, user_id)

    changes: dict[str, Any] = req.changes()
    if changes.get("cover_photo_id") is not None:
        await _owned_photo(storage, changes["cover_photo_id"], user_id)

    gallery = await storage.update_gallery(gallery_id, changes)
    if gallery is None:
        raise NotFoundError("Gallery not found")
    log.info("gallery.updated", gallery_id=gallery_id, fields=sorted(changes))
    return gallery


async def delete_gallery(storage: Storage, gallery_id: int, user_id: str) -> None:
    """Delete a gallery; its photos are kept and detached."""
    await _owned_gallery(storage, gallery_id, user_id)
    if not await storage.delete_gallery(gallery_id):
        raise NotFoundError("Gallery not found")
    log.info("gallery.deleted", gallery_id=gallery_id, user_id=user_id)
