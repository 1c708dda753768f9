"""
Gallery endpoints.

POST   /api/galleries                 — Create a gallery
GET    /api/galleries/user/{user_id}  — A user's galleries
GET    /api/galleries/{id}            — Get a gallery (counts a view)
GET    /api/galleries/{id}/photos     — Photos in a gallery
PUT    /api/galleries/{id}            — Update own gallery
DELETE /api/galleries/{id}            — Delete own gallery (photos are kept)
POST   /api/galleries/{id}/like       — Like a gallery
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user, get_storage, get_viewer_id
from app.models.user import User
from app.services import media as media_service
from app.storage import Storage
from shutterclub_shared.schemas.galleries import (
    GalleryCreateRequest,
    GalleryRead,
    GalleryUpdateRequest,
)
from shutterclub_shared.schemas.photos import PhotoRead

router = APIRouter()


@router.post("", response_model=GalleryRead, status_code=201)
async def create_gallery(
    body: GalleryCreateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await media_service.create_gallery(storage, body, user.id)


@router.get("/user/{user_id}", response_model=list[GalleryRead])
async def user_galleries(
    user_id: str,
    viewer_id: Optional[str] = Depends(get_viewer_id),
    storage: Storage = Depends(get_storage),
):
    return await media_service.list_user_galleries(storage, user_id, viewer_id)


@router.get("/{gallery_id}", response_model=GalleryRead)
async def get_gallery(
    gallery_id: int,
    viewer_id: Optional[str] = Depends(get_viewer_id),
    storage: Storage = Depends(get_storage),
):
    return await media_service.view_gallery(storage, gallery_id, viewer_id)


@router.get("/{gallery_id}/photos", response_model=list[PhotoRead])
async def gallery_photos(
    gallery_id: int,
    viewer_id: Optional[str] = Depends(get_viewer_id),
    storage: Storage = Depends(get_storage),
):
    return await media_service.list_gallery_photos(storage, gallery_id, viewer_id)


@router.put("/{gallery_id}", response_model=GalleryRead)
async def update_gallery(
    gallery_id: int,
    body: GalleryUpdateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await media_service.update_gallery(storage, gallery_id, body, user.id)


@router.delete("/{gallery_id}", status_code=204)
async def delete_gallery(
    gallery_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await media_service.delete_gallery(storage, gallery_id, user.id)


@router.post("/{gallery_id}/like", response_model=GalleryRead)
async def like_gallery(
    gallery_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await media_service.like_gallery(storage, gallery_id, user.id)
