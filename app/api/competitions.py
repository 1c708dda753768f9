"""
Competition endpoints.

GET    /api/competitions                                   — Active competitions
GET    /api/competitions/{id}                              — Get a competition
PUT    /api/competitions/{id}                              — Update (org Admin only)
DELETE /api/competitions/{id}                              — Delete (org Admin only)
POST   /api/competitions/{id}/photos                       — Enter a photo
GET    /api/competitions/{id}/photos                       — Entries, newest first
DELETE /api/competitions/{id}/photos/{photo_id}            — Withdraw an entry
GET    /api/competitions/{id}/photos/{photo_id}/ratings    — Ratings within the competition
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user, get_storage
from app.core.errors import NotFoundError
from app.models.user import User
from app.services import organizations as org_service
from app.services import ratings as rating_service
from app.services import submissions as submission_service
from app.storage import Storage
from shutterclub_shared.schemas.competitions import (
    CompetitionPhotoRead,
    CompetitionRead,
    CompetitionUpdateRequest,
    SubmissionCreateRequest,
    SubmissionRead,
)
from shutterclub_shared.schemas.photos import PhotoRead
from shutterclub_shared.schemas.ratings import RatingSummary

router = APIRouter()


@router.get("", response_model=list[CompetitionRead])
async def active_competitions(storage: Storage = Depends(get_storage)):
    return await storage.get_active_competitions()


@router.get("/{competition_id}", response_model=CompetitionRead)
async def get_competition(competition_id: int, storage: Storage = Depends(get_storage)):
    return await org_service.get_competition(storage, competition_id)


@router.put("/{competition_id}", response_model=CompetitionRead)
async def update_competition(
    competition_id: int,
    body: CompetitionUpdateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await org_service.update_competition(storage, competition_id, body, user.id)


@router.delete("/{competition_id}", status_code=204)
async def delete_competition(
    competition_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await org_service.delete_competition(storage, competition_id, user.id)


@router.post("/{competition_id}/photos", response_model=SubmissionRead, status_code=201)
async def submit_photo(
    competition_id: int,
    body: SubmissionCreateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Enter one of the caller's photos into the competition."""
    return await submission_service.submit_photo(storage, user.id, competition_id, body.photo_id)


@router.get("/{competition_id}/photos", response_model=list[CompetitionPhotoRead])
async def competition_photos(competition_id: int, storage: Storage = Depends(get_storage)):
    pairs = await submission_service.list_entries(storage, competition_id)
    return [
        CompetitionPhotoRead(
            **SubmissionRead.model_validate(submission).model_dump(),
            photo=PhotoRead.model_validate(photo),
        )
        for submission, photo in pairs
    ]


@router.delete("/{competition_id}/photos/{photo_id}", status_code=204)
async def withdraw_photo(
    competition_id: int,
    photo_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    if not await submission_service.withdraw_photo(storage, user.id, competition_id, photo_id):
        raise NotFoundError("Photo is not entered in this competition")


@router.get(
    "/{competition_id}/photos/{photo_id}/ratings", response_model=RatingSummary
)
async def competition_photo_ratings(
    competition_id: int,
    photo_id: int,
    storage: Storage = Depends(get_storage),
):
    return await rating_service.competition_summary(storage, competition_id, photo_id)
