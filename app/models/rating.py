"""Photo rating model.

A user holds at most one general rating per photo and, independently, one
rating per competition the photo was entered into.
"""

from typing import Optional

from sqlalchemy import CheckConstraint, Index, UniqueConstraint, text
from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class Rating(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "photo_ratings"
    __table_args__ = (
        UniqueConstraint(
            "photo_id",
            "user_id",
            "is_competition_rating",
            "competition_id",
            name="uq_photo_ratings_context",
        ),
        # NULL competition_id never collides in the constraint above
        Index(
            "uq_photo_ratings_general",
            "photo_id",
            "user_id",
            unique=True,
            postgresql_where=text("competition_id IS NULL"),
            sqlite_where=text("competition_id IS NULL"),
        ),
        CheckConstraint("rating >= 0 AND rating <= 5", name="rating_range"),
    )

    photo_id: int = Field(foreign_key="photos.id", nullable=False, index=True, ondelete="CASCADE")
    user_id: str = Field(foreign_key="users.id", nullable=False, ondelete="CASCADE")
    rating: float = Field(nullable=False)
    is_competition_rating: bool = Field(default=False, nullable=False)
    competition_id: Optional[int] = Field(
        default=None, foreign_key="competitions.id", index=True, ondelete="CASCADE"
    )
