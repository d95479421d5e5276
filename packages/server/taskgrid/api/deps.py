"""
Request-scoped dependencies: caller identity, access context, untrusted hints.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import Depends, Header, HTTPException
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession

from taskgrid.access.context import AccessContext
from taskgrid.access.guard import AccessGuard
from taskgrid.core.database import async_session_factory, get_session
from taskgrid.models.user import User
from taskgrid.services.tenancy_store import SqlTenancyStore

log = structlog.get_logger()

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)


async def get_current_user_id(
    authorization: Optional[str] = Depends(api_key_header),
    session: AsyncSession = Depends(get_session),
) -> uuid.UUID:
    """Bearer user-id authentication, verified against the users table."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authentication required")

    token = authorization.replace("Bearer ", "").strip()
    try:
        user_id = uuid.UUID(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token format")

    if await session.get(User, user_id) is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user_id


async def get_access_context(session: AsyncSession = Depends(get_session)) -> AccessContext:
    """One memoizing access context per request; dropped when the request ends."""
    return AccessContext(AccessGuard(SqlTenancyStore(session)))


def get_organization_hint(
    x_organization_id: Optional[str] = Header(default=None),
) -> Optional[uuid.UUID]:
    """Organization id sent by the client. Only ever a hint, never trusted."""
    if not x_organization_id:
        return None
    try:
        return uuid.UUID(x_organization_id)
    except ValueError:
        log.info("request.invalid_organization_hint", value=x_organization_id)
        return None


def get_session_factory():
    return async_session_factory
