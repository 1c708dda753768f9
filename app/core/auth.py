"""
Authentication for Shutterclub.

Identity is owned by an external provider that issues HS256 JWTs:
- ``sub`` is the stable user id
- ``email``, ``first_name``, ``last_name``, ``profile_image_url`` seed the
  user record on first sight

This module only verifies signatures; it never handles credentials.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
import structlog
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from app.core.config import get_settings
from app.core.errors import AuthenticationError
from app.models.user import User
from app.services import users as user_service
from app.storage import Storage

log = structlog.get_logger()
settings = get_settings()

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: str,
    *,
    expires_delta: timedelta | None = None,
    **claims: Any,
) -> str:
    """Create a signed identity token (development and tests)."""
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {"sub": user_id, "iat": now, "exp": exp, **claims}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub"]},
    )


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

class Identity:
    """Verified token subject and its claims."""

    def __init__(self, user_id: str, claims: dict):
        self.user_id = user_id
        self.claims = claims


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def _parse_identity(authorization: Optional[str]) -> Optional[Identity]:
    if not authorization:
        return None
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Authorization header must be a Bearer token")

    try:
        payload = decode_jwt(authorization[7:].strip())
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise AuthenticationError("Token subject missing")
    return Identity(user_id=sub, claims=payload)


async def get_optional_identity(
    authorization: Optional[str] = Depends(authorization_header),
) -> Optional[Identity]:
    """Identity when a token is sent; anonymous otherwise. Bad tokens still fail."""
    return _parse_identity(authorization)


async def get_identity(
    authorization: Optional[str] = Depends(authorization_header),
) -> Identity:
    identity = _parse_identity(authorization)
    if identity is None:
        raise AuthenticationError("Authentication required")
    return identity


async def get_current_user(
    request: Request,
    identity: Identity = Depends(get_identity),
    storage: Storage = Depends(get_storage),
) -> User:
    """Main authentication dependency. Provisions the user on first sight."""
    user = await user_service.ensure_user(storage, identity.user_id, identity.claims)
    request.state.user_id = user.id
    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user


async def get_viewer_id(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Optional[str]:
    return identity.user_id if identity else None
