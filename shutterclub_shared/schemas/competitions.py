"""
Competition and submission schemas.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, model_validator

from .common import PartialUpdate
from .photos import PhotoRead


class RejectionReason(str, Enum):
    """Why a photo could not be entered into a competition."""
    COMPETITION_NOT_FOUND = "competition_not_found"
    COMPETITION_INACTIVE = "competition_inactive"
    PHOTO_NOT_FOUND = "photo_not_found"
    NOT_OWNER = "not_owner"
    NOT_MEMBER = "not_member"


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None)


def _check_dates(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is None or end is None:
        return
    # Mixed naive/aware values cannot be ordered; naive values are taken as UTC
    if (start.tzinfo is None) != (end.tzinfo is None):
        start, end = _as_naive_utc(start), _as_naive_utc(end)
    if end < start:
        raise ValueError("end_date must not be before start_date")


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class CompetitionCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[datetime] = Field(None, description="Defaults to now")
    end_date: Optional[datetime] = None
    is_active: bool = True

    @model_validator(mode="after")
    def validate_dates(self):
        _check_dates(self.start_date, self.end_date)
        return self


class CompetitionUpdateRequest(PartialUpdate):
    non_nullable: ClassVar[tuple[str, ...]] = ("name", "start_date", "is_active")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def validate_dates(self):
        _check_dates(self.start_date, self.end_date)
        return self


class SubmissionCreateRequest(BaseModel):
    photo_id: int


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class CompetitionRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    organization_id: int
    start_date: datetime
    end_date: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SubmissionRead(BaseModel):
    competition_id: int
    photo_id: int
    submitted_at: datetime

    model_config = {"from_attributes": True}


class CompetitionPhotoRead(SubmissionRead):
    photo: PhotoRead
