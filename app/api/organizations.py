"""
Organization endpoints.

GET    /api/organizations                          — List all orgs
POST   /api/organizations                          — Create an org (creator becomes admin)
GET    /api/organizations/user/{user_id}           — Orgs a user belongs to
GET    /api/organizations/{id}                     — Get org details
PUT    /api/organizations/{id}                     — Update org (Admin only)
DELETE /api/organizations/{id}                     — Delete org (Admin only)
GET    /api/organizations/{id}/users               — List members
GET    /api/organizations/{id}/admins              — List admins
POST   /api/organizations/{id}/users               — Add or re-role a member (Admin only)
DELETE /api/organizations/{id}/users/{user_id}     — Remove a member (Admin only)
POST   /api/organizations/{id}/competitions        — Create a competition (Admin only)
GET    /api/organizations/{id}/competitions        — List the org's competitions
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user, get_storage
from app.models import Membership, User
from app.services import organizations as org_service
from app.storage import Storage
from shutterclub_shared.schemas.competitions import CompetitionCreateRequest, CompetitionRead
from shutterclub_shared.schemas.organizations import (
    MemberAddRequest,
    MembershipRead,
    OrganizationCreateRequest,
    OrganizationMemberRead,
    OrganizationRead,
    OrganizationUpdateRequest,
)
from shutterclub_shared.schemas.users import UserRead

router = APIRouter()


def _member_response(membership: Membership, user: User) -> OrganizationMemberRead:
    return OrganizationMemberRead(
        **MembershipRead.model_validate(membership).model_dump(),
        user=UserRead.model_validate(user),
    )


@router.get("", response_model=list[OrganizationRead])
async def list_orgs(storage: Storage = Depends(get_storage)):
    return await storage.get_organizations()


@router.post("", response_model=OrganizationRead, status_code=201)
async def create_org(
    body: OrganizationCreateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Create a new organization. The creator becomes an administrator."""
    return await org_service.create_org(storage, body, user.id)


@router.get("/user/{user_id}", response_model=list[OrganizationRead])
async def user_orgs(user_id: str, storage: Storage = Depends(get_storage)):
    return await storage.get_organizations_by_user(user_id)


@router.get("/{organization_id}", response_model=OrganizationRead)
async def get_org(organization_id: int, storage: Storage = Depends(get_storage)):
    return await org_service.get_org(storage, organization_id)


@router.put("/{organization_id}", response_model=OrganizationRead)
async def update_org(
    organization_id: int,
    body: OrganizationUpdateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await org_service.update_org(storage, organization_id, body, user.id)


@router.delete("/{organization_id}", status_code=204)
async def delete_org(
    organization_id: int,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await org_service.delete_org(storage, organization_id, user.id)


@router.get("/{organization_id}/users", response_model=list[OrganizationMemberRead])
async def list_members(organization_id: int, storage: Storage = Depends(get_storage)):
    pairs = await org_service.list_members(storage, organization_id)
    return [_member_response(m, u) for m, u in pairs]


@router.get("/{organization_id}/admins", response_model=list[OrganizationMemberRead])
async def list_admins(organization_id: int, storage: Storage = Depends(get_storage)):
    pairs = await org_service.list_members(storage, organization_id, admins_only=True)
    return [_member_response(m, u) for m, u in pairs]


@router.post("/{organization_id}/users", response_model=MembershipRead, status_code=201)
async def add_member(
    organization_id: int,
    body: MemberAddRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await org_service.add_member(storage, organization_id, body, user.id)


@router.delete("/{organization_id}/users/{user_id}", status_code=204)
async def remove_member(
    organization_id: int,
    user_id: str,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await org_service.remove_member(storage, organization_id, user_id, user.id)


@router.post(
    "/{organization_id}/competitions", response_model=CompetitionRead, status_code=201
)
async def create_competition(
    organization_id: int,
    body: CompetitionCreateRequest,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await org_service.create_competition(storage, organization_id, body, user.id)


@router.get("/{organization_id}/competitions", response_model=list[CompetitionRead])
async def list_competitions(organization_id: int, storage: Storage = Depends(get_storage)):
    return await org_service.list_competitions(storage, organization_id)
