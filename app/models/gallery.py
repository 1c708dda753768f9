"""Gallery model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class Gallery(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "galleries"

    name: str = Field(nullable=False)
    description: Optional[str] = None
    user_id: str = Field(foreign_key="users.id", nullable=False, index=True, ondelete="CASCADE")
    # No FK: photos already reference galleries, and the store clears it on photo deletion
    cover_photo_id: Optional[int] = None
    is_public: bool = Field(default=True, nullable=False)
    view_count: int = Field(default=0, nullable=False)
    like_count: int = Field(default=0, nullable=False)
