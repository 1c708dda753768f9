"""
Organization authorization rules.

Any mutation of an organization, or of a competition under it, requires an
admin membership in that organization. Entering photos and rating in
competitions requires any membership.
"""

from __future__ import annotations

from app.core.errors import AuthorizationError
from app.storage import Storage


async def is_admin(storage: Storage, user_id: str, organization_id: int) -> bool:
    return await storage.is_user_organization_admin(user_id, organization_id)


async def is_member(storage: Storage, user_id: str, organization_id: int) -> bool:
    return await storage.get_user_organization(user_id, organization_id) is not None


async def require_admin(storage: Storage, user_id: str, organization_id: int) -> None:
    if not await is_admin(storage, user_id, organization_id):
        raise AuthorizationError("Organization admin access required")


async def require_member(storage: Storage, user_id: str, organization_id: int) -> None:
    if not await is_member(storage, user_id, organization_id):
        raise AuthorizationError("Organization membership required")
