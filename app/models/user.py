"""User model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin


class User(TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(primary_key=True, nullable=False)  # external identity subject
    email: Optional[str] = Field(default=None, unique=True, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    username: Optional[str] = Field(default=None, unique=True, index=True)
    bio: Optional[str] = None
