"""Gallery schemas."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from .common import PartialUpdate


class GalleryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_public: bool = True
    cover_photo_id: Optional[int] = None


class GalleryUpdateRequest(PartialUpdate):
    non_nullable: ClassVar[tuple[str, ...]] = ("name", "is_public")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    is_public: Optional[bool] = None
    cover_photo_id: Optional[int] = None


class GalleryRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    user_id: str
    cover_photo_id: Optional[int] = None
    is_public: bool
    view_count: int
    like_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
