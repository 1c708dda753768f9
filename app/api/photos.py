"""
Photo endpoints.

POST   /api/photos                   — Upload a photo record
GET    /api/photos?limit=            — Recent public photos with their owners
GET    /api/photos/user/{user_id}    — A user's photos
GET    /api/photos/{id}              — Get a photo (counts a view)
PUT    /api/photos/{id}              — Update own photo
DELETE /api/photos/{id}              — Delete own photo
POST   /api/photos/{id}/rate         — Rate a photo, generally or in a competition
GET    /api/photos/{id}/ratings      — General ratings and their average
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user, get_storage, get_viewer_id
from app.core.config import get_settings
from app.models.user import User
from app.services import media as media_service
from app.services import ratings as rating_service
from app.storage import Storage
from shutterclub_shared.schemas.photos import (
    PhotoCreateRequest,
    PhotoRead,
    PhotoUpdateRequest,
    RecentPhotoRead,
)
from shutterclub_shared.schemas.ratings import RatingRead, RatingRequest, RatingSummary
from shutterclub_shared.schemas.users import UserRead

settings = get_settings()
router = APIRouter()


@router.post("", response_model=PhotoRead, status_code=201)
async def create_photo(
    body: PhotoCreateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await media_service.create_photo(storage, body, user.id)


@router.get("", response_model=list[RecentPhotoRead])
async def recent_photos(
    limit: Optional[int] = Query(None, ge=1, le=100),
    storage: Storage = Depends(get_storage),
):
    """Newest public photos, each with its owner."""
    pairs = await media_service.recent_photos(storage, limit or settings.recent_photos_limit)
    return [
        RecentPhotoRead(
            **PhotoRead.model_validate(photo).model_dump(),
            user=UserRead.model_validate(owner),
        )
        for photo, owner in pairs
    ]


@router.get("/user/{user_id}", response_model=list[PhotoRead])
async def user_photos(
    user_id: str,
    viewer_id: Optional[str] = Depends(get_viewer_id),
    storage: Storage = Depends(get_storage),
):
    return await media_service.list_user_photos(storage, user_id, viewer_id)


@router.get("/{photo_id}", response_model=PhotoRead)
async def get_photo(
    photo_id: int,
    viewer_id: Optional[str] = Depends(get_viewer_id),
    storage: Storage = Depends(get_storage),
):
    return await media_service.view_photo(storage, photo_id, viewer_id)


@router.put("/{photo_id}", response_model=PhotoRead)
async def update_photo(
    photo_id: int,
    body: PhotoUpdateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await media_service.update_photo(storage, photo_id, body, user.id)


@router.delete("/{photo_id}", status_code=204)
async def delete_photo(
    photo_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await media_service.delete_photo(storage, photo_id, user.id)


@router.post("/{photo_id}/rate", response_model=RatingRead)
async def rate_photo(
    photo_id: int,
    body: RatingRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await rating_service.rate_photo(storage, user.id, photo_id, body)


@router.get("/{photo_id}/ratings", response_model=RatingSummary)
async def photo_ratings(photo_id: int, storage: Storage = Depends(get_storage)):
    return await rating_service.photo_summary(storage, photo_id)
