"""Photo schemas."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from .common import PartialUpdate
from .users import UserRead

IMAGE_URL_PATTERN = r"^https?://\S+$"


class PhotoCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: str = Field(..., pattern=IMAGE_URL_PATTERN, description="Must be a valid URL")
    is_public: bool = True
    gallery_id: Optional[int] = None


class PhotoUpdateRequest(PartialUpdate):
    non_nullable: ClassVar[tuple[str, ...]] = ("title", "image_url", "is_public")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, pattern=IMAGE_URL_PATTERN)
    is_public: Optional[bool] = None
    gallery_id: Optional[int] = None  # explicit null detaches the photo from its gallery


class PhotoRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    image_url: str
    is_public: bool
    user_id: str
    gallery_id: Optional[int] = None
    view_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RecentPhotoRead(PhotoRead):
    user: UserRead
