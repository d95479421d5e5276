"""
Access probing: what the caller may do with one entity.
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from taskgrid.access.context import AccessContext
from taskgrid.api.deps import get_access_context, get_current_user_id, get_organization_hint
from taskgrid_shared.schemas.access import AccessResult
from taskgrid_shared.schemas.common import EntityKind

router = APIRouter()


@router.get("/{kind}/{entity_id}", response_model=AccessResult)
async def get_access_endpoint(
    kind: str,
    entity_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    access: AccessContext = Depends(get_access_context),
    organization_hint: Optional[uuid.UUID] = Depends(get_organization_hint),
):
    try:
        entity_kind = EntityKind(kind)
    except ValueError:
        valid = ", ".join(k.value for k in EntityKind)
        raise HTTPException(status_code=400, detail=f"Invalid scope: {kind}. Must be one of: {valid}")
    return await access.access(entity_kind, entity_id, user_id, organization_hint=organization_hint)
