"""
Membership endpoints for organizations, workspaces and projects.

Paths take the level as ``organization``, ``workspace`` or ``project``.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskgrid.access.context import AccessContext
from taskgrid.api.deps import get_access_context, get_current_user_id
from taskgrid.core.database import get_session
from taskgrid.services.members import add_member, remove_member, update_member_role
from taskgrid_shared.schemas.common import MEMBERSHIP_LEVELS, EntityKind
from taskgrid_shared.schemas.members import MemberAdd, MemberRead, MemberRoleUpdate

router = APIRouter()


def _level(level: str) -> EntityKind:
    try:
        kind = EntityKind(level)
    except ValueError:
        kind = None
    if kind not in MEMBERSHIP_LEVELS:
        raise HTTPException(status_code=400, detail=f"No membership at level '{level}'")
    return kind


def _read(kind: EntityKind, entity_id: uuid.UUID, edge) -> MemberRead:
    return MemberRead(level=kind, entity_id=entity_id, user_id=edge.user_id, role=edge.role)


@router.post("/{level}/{entity_id}", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
async def add_member_endpoint(
    level: str,
    entity_id: uuid.UUID,
    body: MemberAdd,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    kind = _level(level)
    edge = await add_member(session, access, kind, entity_id, body.user_id, body.role, user_id)
    return _read(kind, entity_id, edge)


@router.patch("/{level}/{entity_id}/{member_id}", response_model=MemberRead)
async def update_member_endpoint(
    level: str,
    entity_id: uuid.UUID,
    member_id: uuid.UUID,
    body: MemberRoleUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    kind = _level(level)
    edge = await update_member_role(session, access, kind, entity_id, member_id, body.role, user_id)
    return _read(kind, entity_id, edge)


@router.delete("/{level}/{entity_id}/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member_endpoint(
    level: str,
    entity_id: uuid.UUID,
    member_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    session: AsyncSession = Depends(get_session),
):
    kind = _level(level)
    await remove_member(session, access, kind, entity_id, member_id, user_id)
