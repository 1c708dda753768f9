"""Photo model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class Photo(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "photos"

    title: str = Field(nullable=False)
    description: Optional[str] = None
    image_url: str = Field(nullable=False)
    is_public: bool = Field(default=True, nullable=False)
    user_id: str = Field(foreign_key="users.id", nullable=False, index=True, ondelete="CASCADE")
    gallery_id: Optional[int] = Field(
        default=None, foreign_key="galleries.id", index=True, ondelete="SET NULL"
    )
    view_count: int = Field(default=0, nullable=False)
