"""
Competition submission workflow.

A photo may be entered into a competition when the competition is active, the
acting user owns the photo and belongs to the competition's organization.
Checks run in a fixed order and the first failing one is reported.
"""

from __future__ import annotations

import structlog

from app.core.errors import AppError, AuthorizationError, NotFoundError
from app.models import Photo, Submission
from app.services.authorization import is_admin, is_member
from app.storage import Storage

from shutterclub_shared.schemas.competitions import RejectionReason

log = structlog.get_logger()

REJECTION_STATUS = {
    RejectionReason.COMPETITION_NOT_FOUND: 404,
    RejectionReason.COMPETITION_INACTIVE: 400,
    RejectionReason.PHOTO_NOT_FOUND: 404,
    RejectionReason.NOT_OWNER: 403,
    RejectionReason.NOT_MEMBER: 403,
}

REJECTION_MESSAGES = {
    RejectionReason.COMPETITION_NOT_FOUND: "Competition not found",
    RejectionReason.COMPETITION_INACTIVE: "Competition is not active",
    RejectionReason.PHOTO_NOT_FOUND: "Photo not found",
    RejectionReason.NOT_OWNER: "You can only submit your own photos",
    RejectionReason.NOT_MEMBER: "You must be a member of the organization to submit photos",
}


class SubmissionRejected(AppError):
    """A photo failed one of the competition entry checks."""

    def __init__(self, reason: RejectionReason):
        super().__init__(REJECTION_MESSAGES[reason])
        self.reason = reason
        self.status_code = REJECTION_STATUS[reason]
        self.code = reason.value.upper()


async def submit_photo(
    storage: Storage, user_id: str, competition_id: int, photo_id: int
) -> Submission:
    """Enter a photo into a competition; re-submitting refreshes the timestamp."""
    competition = await storage.get_competition(competition_id)
    if competition is None:
        raise SubmissionRejected(RejectionReason.COMPETITION_NOT_FOUND)
    if not competition.is_active:
        raise SubmissionRejected(RejectionReason.COMPETITION_INACTIVE)

    photo = await storage.get_photo(photo_id)
    if photo is None:
        raise SubmissionRejected(RejectionReason.PHOTO_NOT_FOUND)
    if photo.user_id != user_id:
        raise SubmissionRejected(RejectionReason.NOT_OWNER)

    if not await is_member(storage, user_id, competition.organization_id):
        raise SubmissionRejected(RejectionReason.NOT_MEMBER)

    submission = await storage.add_photo_to_competition(competition_id, photo_id)
    log.info(
        "submission.created",
        competition_id=competition_id,
        photo_id=photo_id,
        user_id=user_id,
    )
    return submission


async def withdraw_photo(
    storage: Storage, user_id: str, competition_id: int, photo_id: int
) -> bool:
    """Remove a photo from a competition (photo owner or org admin).

    Returns whether the photo had been submitted.
    """
    competition = await storage.get_competition(competition_id)
    if competition is None:
        raise NotFoundError("Competition not found")
    photo = await storage.get_photo(photo_id)
    if photo is None:
        raise NotFoundError("Photo not found")

    if photo.user_id != user_id and not await is_admin(
        storage, user_id, competition.organization_id
    ):
        raise AuthorizationError("Only the photo owner or an organization admin can withdraw it")

    removed = await storage.remove_photo_from_competition(competition_id, photo_id)
    if removed:
        log.info(
            "submission.withdrawn",
            competition_id=competition_id,
            photo_id=photo_id,
            by=user_id,
        )
    return removed


async def list_entries(storage: Storage, competition_id: int) -> list[tuple[Submission, Photo]]:
    if await storage.get_competition(competition_id) is None:
        raise NotFoundError("Competition not found")
    return await storage.get_competition_photos(competition_id)
