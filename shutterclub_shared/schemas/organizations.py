"""
Organization and membership schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from .common import PartialUpdate
from .users import UserRead


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrganizationCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Organization display name")
    description: Optional[str] = Field(None, max_length=2000)


class OrganizationUpdateRequest(PartialUpdate):
    non_nullable: ClassVar[tuple[str, ...]] = ("name",)

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)


class MemberAddRequest(BaseModel):
    """Add a user to the org, or overwrite the role of an existing member."""
    user_id: str = Field(..., min_length=1)
    is_admin: bool = False


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrganizationRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MembershipRead(BaseModel):
    user_id: str
    organization_id: int
    is_admin: bool
    joined_at: datetime

    model_config = {"from_attributes": True}


class OrganizationMemberRead(MembershipRead):
    user: UserRead
