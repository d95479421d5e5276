"""
Initial setup endpoints. Unauthenticated: they only work before any user exists.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from taskgrid.api.deps import get_session_factory
from taskgrid.services.setup import get_setup_status, setup_initial_admin
from taskgrid_shared.schemas.setup import SetupAdminRequest, SetupResult, SetupStatus

router = APIRouter()


@router.get("/status", response_model=SetupStatus)
async def setup_status_endpoint(session_factory=Depends(get_session_factory)):
    return await get_setup_status(session_factory)


@router.post("/admin", response_model=SetupResult, status_code=status.HTTP_201_CREATED)
async def setup_admin_endpoint(
    body: SetupAdminRequest,
    session_factory=Depends(get_session_factory),
):
    return await setup_initial_admin(session_factory, body)
