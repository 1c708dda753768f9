"""Competition model."""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin, utcnow


class Competition(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "competitions"

    name: str = Field(nullable=False)
    description: Optional[str] = None
    organization_id: int = Field(
        foreign_key="organizations.id", nullable=False, index=True, ondelete="CASCADE"
    )
    start_date: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
    end_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    is_active: bool = Field(default=True, nullable=False, index=True)
