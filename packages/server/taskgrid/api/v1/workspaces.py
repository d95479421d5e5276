"""
Workspace endpoints: scoped project listing.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskgrid.access.context import AccessContext
from taskgrid.api.deps import get_access_context, get_current_user_id
from taskgrid.core.database import get_session
from taskgrid.services.listing import list_projects
from taskgrid_shared.schemas.listing import ProjectRead

router = APIRouter()


@router.get("/{workspace_id}/projects", response_model=List[ProjectRead])
async def list_projects_endpoint(
    workspace_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    return await list_projects(session, access, workspace_id, user_id)
