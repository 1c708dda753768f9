"""Competition submission (join table between competitions and photos)."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import utcnow


class Submission(SQLModel, table=True):
    __tablename__ = "competition_photos"

    competition_id: int = Field(
        foreign_key="competitions.id", primary_key=True, ondelete="CASCADE"
    )
    photo_id: int = Field(foreign_key="photos.id", primary_key=True, ondelete="CASCADE")
    submitted_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
