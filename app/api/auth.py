"""
Authentication endpoints.

Sign-in happens at the external identity provider; this API only reports who
the bearer token belongs to.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user
from app.models.user import User
from shutterclub_shared.schemas.users import UserRead

router = APIRouter()


@router.get("/user", response_model=UserRead)
async def current_user(user: User = Depends(get_current_user)):
    """Return the authenticated user, provisioning the record on first login."""
    return user
