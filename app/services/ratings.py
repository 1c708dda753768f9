"""
Photo ratings, general and per competition.
"""

from __future__ import annotations

from typing import Optional

import structlog

from app.core.errors import NotFoundError, ValidationError
from app.models import Photo, Rating
from app.services.authorization import require_member
from app.storage import Storage

from shutterclub_shared.schemas.ratings import RatingRead, RatingRequest, RatingSummary

log = structlog.get_logger()


class PhotoNotSubmitted(ValidationError):
    code = "PHOTO_NOT_SUBMITTED"


def _summary(ratings: list[Rating], avg: Optional[float]) -> RatingSummary:
    return RatingSummary(
        ratings=[RatingRead.model_validate(r) for r in ratings],
        avg_rating=avg,
    )


async def _get_photo(storage: Storage, photo_id: int) -> Photo:
    photo = await storage.get_photo(photo_id)
    if photo is None:
        raise NotFoundError("Photo not found")
    return photo


async def rate_photo(
    storage: Storage, user_id: str, photo_id: int, req: RatingRequest
) -> Rating:
    """Record (or overwrite) the user's rating of a photo in the requested context."""
    await _get_photo(storage, photo_id)

    if req.is_competition_rating:
        competition = await storage.get_competition(req.competition_id)
        if competition is None:
            raise NotFoundError("Competition not found")
        if not await storage.is_photo_in_competition(photo_id, competition.id):
            raise PhotoNotSubmitted("Photo is not submitted to this competition")
        await require_member(storage, user_id, competition.organization_id)

    rating = await storage.rate_photo(
        {
            "photo_id": photo_id,
            "user_id": user_id,
            "rating": req.rating,
            "is_competition_rating": req.is_competition_rating,
            "competition_id": req.competition_id,
        }
    )
    log.info(
        "rating.upserted",
        photo_id=photo_id,
        user_id=user_id,
        rating=req.rating,
        competition_id=req.competition_id,
    )
    return rating


async def photo_summary(storage: Storage, photo_id: int) -> RatingSummary:
    """General-context ratings of a photo and their mean."""
    await _get_photo(storage, photo_id)
    ratings = await storage.get_photo_ratings(photo_id)
    avg = await storage.get_photo_average_rating(photo_id)
    return _summary(ratings, avg)


async def competition_summary(
    storage: Storage, competition_id: int, photo_id: int
) -> RatingSummary:
    """Ratings a photo received within one competition and their mean."""
    if await storage.get_competition(competition_id) is None:
        raise NotFoundError("Competition not found")
    await _get_photo(storage, photo_id)
    ratings = await storage.get_competition_photo_ratings(photo_id, competition_id)
    avg = await storage.get_competition_photo_average_rating(photo_id, competition_id)
    return _summary(ratings, avg)
