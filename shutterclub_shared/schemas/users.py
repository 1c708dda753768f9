"""User profile schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserRead(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UsernameUpdateRequest(BaseModel):
    username: str = Field(
        ...,
        min_length=3,
        max_length=30,
        pattern=r"^[a-zA-Z0-9_-]+$",
        description="Letters, numbers, underscores and hyphens",
    )


class BioUpdateRequest(BaseModel):
    bio: str = Field(..., min_length=1, max_length=200)


class UserStatsResponse(BaseModel):
    photo_count: int
    gallery_count: int
    organization_count: int
    competition_count: int  # active competitions across the user's organizations
