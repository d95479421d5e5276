"""
Project endpoints: scoped task listing.
"""

from __future__ import annotations

import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskgrid.access.context import AccessContext
from taskgrid.api.deps import get_access_context, get_current_user_id
from taskgrid.core.database import get_session
from taskgrid.services.listing import list_tasks
from taskgrid_shared.schemas.listing import TaskRead

router = APIRouter()


@router.get("/{project_id}/tasks", response_model=List[TaskRead])
async def list_tasks_endpoint(
    project_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    """Elevated callers see every task; everyone else only tasks they are on."""
    return await list_tasks(session, access, project_id, user_id)
