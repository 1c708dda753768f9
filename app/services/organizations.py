"""
Organization service — org CRUD, membership management and competitions.
"""

from __future__ import annotations

from datetime import timezone

import structlog

from app.core.errors import NotFoundError, ValidationError
from app.models import Competition, Membership, Organization, User
from app.models.base import utcnow
from app.services.authorization import require_admin
from app.storage import Storage

from shutterclub_shared.schemas.competitions import (
    CompetitionCreateRequest,
    CompetitionUpdateRequest,
)
from shutterclub_shared.schemas.organizations import (
    MemberAddRequest,
    OrganizationCreateRequest,
    OrganizationUpdateRequest,
)

log = structlog.get_logger()


async def get_org(storage: Storage, organization_id: int) -> Organization:
    """Get an org by id; raises 404 if not found."""
    org = await storage.get_organization(organization_id)
    if org is None:
        raise NotFoundError("Organization not found")
    return org


async def get_competition(storage: Storage, competition_id: int) -> Competition:
    competition = await storage.get_competition(competition_id)
    if competition is None:
        raise NotFoundError("Competition not found")
    return competition


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

async def create_org(
    storage: Storage, req: OrganizationCreateRequest, creator_id: str
) -> Organization:
    """Create an org and make the creator an administrator."""
    org = await storage.create_organization(req.model_dump(), creator_id)
    log.info("org.created", org_id=org.id, creator=creator_id)
    return org


async def update_org(
    storage: Storage, organization_id: int, req: OrganizationUpdateRequest, user_id: str
) -> Organization:
    await get_org(storage, organization_id)
    await require_admin(storage, user_id, organization_id)

    org = await storage.update_organization(organization_id, req.changes())
    if org is None:
        raise NotFoundError("Organization not found")
    log.info("org.updated", org_id=organization_id, fields=sorted(req.changes()))
    return org


async def delete_org(storage: Storage, organization_id: int, user_id: str) -> None:
    """Delete the org; memberships and competitions go with it."""
    await get_org(storage, organization_id)
    await require_admin(storage, user_id, organization_id)

    if not await storage.delete_organization(organization_id):
        raise NotFoundError("Organization not found")
    log.info("org.deleted", org_id=organization_id, by=user_id)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

async def list_members(
    storage: Storage, organization_id: int, *, admins_only: bool = False
) -> list[tuple[Membership, User]]:
    await get_org(storage, organization_id)
    if admins_only:
        return await storage.get_organization_admins(organization_id)
    return await storage.get_organization_users(organization_id)


async def add_member(
    storage: Storage, organization_id: int, req: MemberAddRequest, user_id: str
) -> Membership:
    """Add a user to the org, or overwrite an existing member's role (Admin only)."""
    await get_org(storage, organization_id)
    await require_admin(storage, user_id, organization_id)

    if await storage.get_user(req.user_id) is None:
        raise NotFoundError("User not found")

    membership = await storage.add_user_to_organization(
        req.user_id, organization_id, is_admin=req.is_admin
    )
    log.info(
        "org.member_added",
        org_id=organization_id,
        user_id=req.user_id,
        is_admin=req.is_admin,
        by=user_id,
    )
    return membership


async def remove_member(
    storage: Storage, organization_id: int, member_id: str, user_id: str
) -> None:
    """Remove a member (Admin only). The last admin may not remove themself."""
    await get_org(storage, organization_id)
    await require_admin(storage, user_id, organization_id)

    if member_id == user_id:
        admins = await storage.get_organization_admins(organization_id)
        if len(admins) <= 1:
            raise ValidationError(
                "Cannot remove the last admin of an organization",
                fields={"user_id": ["Promote another member to admin first"]},
            )

    if not await storage.remove_user_from_organization(member_id, organization_id):
        raise NotFoundError("User is not a member of this organization")
    log.info("org.member_removed", org_id=organization_id, user_id=member_id, by=user_id)


# ---------------------------------------------------------------------------
# Competitions
# ---------------------------------------------------------------------------

async def create_competition(
    storage: Storage, organization_id: int, req: CompetitionCreateRequest, user_id: str
) -> Competition:
    await get_org(storage, organization_id)
    await require_admin(storage, user_id, organization_id)

    data = req.model_dump()
    if data["start_date"] is None:
        data["start_date"] = utcnow()
    competition = await storage.create_competition({**data, "organization_id": organization_id})
    log.info("competition.created", competition_id=competition.id, org_id=organization_id)
    return competition


async def list_competitions(storage: Storage, organization_id: int) -> list[Competition]:
    await get_org(storage, organization_id)
    return await storage.get_competitions_by_organization(organization_id)


async def update_competition(
    storage: Storage, competition_id: int, req: CompetitionUpdateRequest, user_id: str
) -> Competition:
    current = await get_competition(storage, competition_id)
    await require_admin(storage, user_id, current.organization_id)

    changes = req.changes()
    start = changes.get("start_date", current.start_date)
    end = changes.get("end_date", current.end_date)
    if start is not None and end is not None and _naive(end) < _naive(start):
        raise ValidationError(
            "end_date must not be before start_date",
            fields={"end_date": ["must not be before start_date"]},
        )

    competition = await storage.update_competition(competition_id, changes)
    if competition is None:
        raise NotFoundError("Competition not found")
    log.info("competition.updated", competition_id=competition_id, fields=sorted(changes))
    return competition


async def delete_competition(storage: Storage, competition_id: int, user_id: str) -> None:
    """Delete the competition; its submissions and competition ratings go with it."""
    current = await get_competition(storage, competition_id)
    await require_admin(storage, user_id, current.organization_id)

    if not await storage.delete_competition(competition_id):
        raise NotFoundError("Competition not found")
    log.info("competition.deleted", competition_id=competition_id, by=user_id)


def _naive(value):
    # SQLite hands back naive datetimes; compare wall-clock UTC values
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
