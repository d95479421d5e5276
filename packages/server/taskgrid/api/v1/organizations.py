"""
Organization endpoints: scoped listings and ownership transfer.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskgrid.access.context import AccessContext
from taskgrid.api.deps import get_access_context, get_current_user_id
from taskgrid.core.database import get_session
from taskgrid.services.listing import (
    list_organization_tasks,
    list_organizations,
    list_workspaces,
)
from taskgrid.services.members import transfer_ownership
from taskgrid_shared.schemas.listing import OrganizationRead, TaskRead, WorkspaceRead
from taskgrid_shared.schemas.members import OwnershipTransfer

router = APIRouter()


@router.get("/", response_model=List[OrganizationRead])
async def list_orgs_endpoint(
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    """Organizations the caller owns or belongs to."""
    return await list_organizations(session, user_id)


@router.get("/{organization_id}/workspaces", response_model=List[WorkspaceRead])
async def list_workspaces_endpoint(
    organization_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    return await list_workspaces(session, access, organization_id, user_id)


@router.get("/{organization_id}/tasks", response_model=List[TaskRead])
async def list_org_tasks_endpoint(
    organization_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    """Every task in the organization the caller may see."""
    return await list_organization_tasks(session, access, organization_id, user_id)


@router.post("/{organization_id}/transfer-ownership", response_model=OrganizationRead)
async def transfer_ownership_endpoint(
    organization_id: uuid.UUID,
    body: OwnershipTransfer,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    return await transfer_ownership(session, access, organization_id, body.new_owner_id, user_id)
