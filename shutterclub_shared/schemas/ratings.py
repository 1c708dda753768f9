"""Photo rating schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class RatingRequest(BaseModel):
    rating: float = Field(..., ge=0, le=5)
    is_competition_rating: bool = False
    competition_id: Optional[int] = None

    @model_validator(mode="after")
    def check_competition_context(self):
        if self.is_competition_rating and self.competition_id is None:
            raise ValueError("competition_id is required for competition ratings")
        if not self.is_competition_rating:
            self.competition_id = None
        return self


class RatingRead(BaseModel):
    photo_id: int
    user_id: str
    rating: float
    is_competition_rating: bool
    competition_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RatingSummary(BaseModel):
    ratings: list[RatingRead]
    avg_rating: Optional[float] = None  # None when nobody has rated yet
