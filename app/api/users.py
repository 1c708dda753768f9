"""
User profile endpoints.

POST /api/users/username          — Change the caller's username
POST /api/users/bio               — Change the caller's bio
GET  /api/users/{user_id}/stats   — Profile counters
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user, get_storage
from app.models.user import User
from app.services import users as user_service
from app.storage import Storage
from shutterclub_shared.schemas.users import (
    BioUpdateRequest,
    UserRead,
    UsernameUpdateRequest,
    UserStatsResponse,
)

router = APIRouter()


@router.post("/username", response_model=UserRead)
async def update_username(
    body: UsernameUpdateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await user_service.update_username(storage, user.id, body.username)


@router.post("/bio", response_model=UserRead)
async def update_bio(
    body: BioUpdateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await user_service.update_bio(storage, user.id, body.bio)


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
async def user_stats(user_id: str, storage: Storage = Depends(get_storage)):
    return await user_service.get_user_stats(storage, user_id)
