"""
Membership management: add, re-role and remove edges at any hierarchy level,
and transfer organization ownership.

Guard rules enforced here, on top of AccessGuard:
- only elevated actors manage members, and never above their own role;
- the organization owner cannot be demoted by a role edit or removed;
- ownership moves only through ``transfer_ownership``, by the current owner.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskgrid.access.context import AccessContext
from taskgrid.access.errors import (
    ForbiddenError,
    MembershipConflictError,
    MembershipNotFoundError,
    NotFoundError,
    OwnerRemovalError,
    OwnershipDemotionError,
)
from taskgrid.models.membership import OrganizationMember, membership_table
from taskgrid.models.organization import Organization
from taskgrid.services.audit import record_event
from taskgrid_shared.schemas.access import AccessResult
from taskgrid_shared.schemas.common import EntityKind, Role, RoleSource
from taskgrid_shared.schemas.events import (
    MemberAdded,
    MemberRemoved,
    MemberRoleChanged,
    OwnershipTransferred,
)

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_edge(
    session: AsyncSession, level: EntityKind, entity_id: uuid.UUID, user_id: uuid.UUID
):
    model, entity_col = membership_table(level)
    result = await session.execute(
        select(model).where(model.user_id == user_id, entity_col == entity_id)
    )
    return result.scalar_one_or_none()


async def _get_edge_or_404(
    session: AsyncSession, level: EntityKind, entity_id: uuid.UUID, user_id: uuid.UUID
):
    edge = await _get_edge(session, level, entity_id, user_id)
    if edge is None:
        raise MembershipNotFoundError(level, entity_id, user_id)
    return edge


async def _get_org_or_404(session: AsyncSession, organization_id: uuid.UUID) -> Organization:
    org = await session.get(Organization, organization_id)
    if org is None:
        raise NotFoundError(EntityKind.ORGANIZATION, organization_id)
    return org


def _require_manager(granted: AccessResult, level: EntityKind) -> None:
    if not granted.is_elevated:
        raise ForbiddenError(
            level,
            granted.entity_id,
            granted.user_id,
            f"Only {level.value} owners and managers can manage members",
        )


def _require_within_rank(granted: AccessResult, *roles: Optional[Role]) -> None:
    """An actor cannot grant, or act on someone holding, a role above their own."""
    ceiling = granted.role.rank if granted.role else 0
    for role in roles:
        if role is not None and role.rank > ceiling:
            raise ForbiddenError(
                granted.entity_kind,
                granted.entity_id,
                granted.user_id,
                f"Cannot manage the {role.value} role as {granted.role.value}",
            )


# ---------------------------------------------------------------------------
# Membership edges
# ---------------------------------------------------------------------------


async def add_member(
    session: AsyncSession,
    access: AccessContext,
    level: EntityKind,
    entity_id: uuid.UUID,
    user_id: uuid.UUID,
    role: Role,
    actor_id: uuid.UUID,
):
    """Create a membership edge (direct add or accepted invitation)."""
    level = EntityKind(level)
    granted = await access.access(level, entity_id, actor_id)
    _require_manager(granted, level)
    _require_within_rank(granted, role)

    if await _get_edge(session, level, entity_id, user_id) is not None:
        raise MembershipConflictError(level, entity_id, user_id)

    model, entity_col = membership_table(level)
    edge = model(user_id=user_id, role=role.value, **{entity_col.key: entity_id})
    try:
        async with session.begin_nested():
            session.add(edge)
            await session.flush()
    except IntegrityError:
        raise MembershipConflictError(level, entity_id, user_id) from None

    record_event(
        MemberAdded(actor_id=actor_id, level=level, entity_id=entity_id, user_id=user_id, role=role)
    )
    return edge


async def update_member_role(
    session: AsyncSession,
    access: AccessContext,
    level: EntityKind,
    entity_id: uuid.UUID,
    user_id: uuid.UUID,
    role: Role,
    actor_id: uuid.UUID,
):
    level = EntityKind(level)
    granted = await access.access(level, entity_id, actor_id)
    _require_manager(granted, level)

    if level is EntityKind.ORGANIZATION:
        org = await _get_org_or_404(session, entity_id)
        if org.owner_id == user_id and role is not Role.OWNER:
            log.info(
                "members.owner_demotion_blocked",
                organization_id=str(entity_id),
                actor_id=str(actor_id),
                requested_role=role.value,
            )
            raise OwnershipDemotionError(entity_id, user_id)

    edge = await _get_edge_or_404(session, level, entity_id, user_id)
    previous = Role(edge.role)
    _require_within_rank(granted, role, previous)

    if previous is role:
        return edge

    edge.role = role.value
    session.add(edge)
    await session.flush()

    record_event(
        MemberRoleChanged(
            actor_id=actor_id,
            level=level,
            entity_id=entity_id,
            user_id=user_id,
            previous_role=previous,
            new_role=role,
        )
    )
    return edge


async def remove_member(
    session: AsyncSession,
    access: AccessContext,
    level: EntityKind,
    entity_id: uuid.UUID,
    user_id: uuid.UUID,
    actor_id: uuid.UUID,
) -> None:
    """Delete an edge. Users may always remove themselves; others need elevation."""
    level = EntityKind(level)
    granted = await access.access(level, entity_id, actor_id)
    is_self = user_id == actor_id
    if not is_self:
        _require_manager(granted, level)

    if level is EntityKind.ORGANIZATION:
        org = await _get_org_or_404(session, entity_id)
        if org.owner_id == user_id:
            raise OwnerRemovalError(entity_id, user_id)

    edge = await _get_edge_or_404(session, level, entity_id, user_id)
    previous = Role(edge.role)
    if not is_self:
        _require_within_rank(granted, previous)

    await session.delete(edge)
    await session.flush()

    record_event(
        MemberRemoved(
            actor_id=actor_id,
            level=level,
            entity_id=entity_id,
            user_id=user_id,
            previous_role=previous,
        )
    )


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


async def transfer_ownership(
    session: AsyncSession,
    access: AccessContext,
    organization_id: uuid.UUID,
    new_owner_id: uuid.UUID,
    actor_id: uuid.UUID,
) -> Organization:
    """Hand the organization to an existing member.

    The previous owner keeps a MANAGER edge so they do not lose access.
    """
    granted = await access.organization(organization_id, actor_id)
    if granted.source is not RoleSource.OWNERSHIP:
        raise ForbiddenError(
            EntityKind.ORGANIZATION,
            organization_id,
            actor_id,
            "Only the organization owner can transfer ownership",
        )

    org = await _get_org_or_404(session, organization_id)
    previous_owner_id = org.owner_id
    if new_owner_id == previous_owner_id:
        return org

    new_edge = await _get_edge_or_404(session, EntityKind.ORGANIZATION, organization_id, new_owner_id)
    new_edge.role = Role.OWNER.value
    session.add(new_edge)

    old_edge = await _get_edge(session, EntityKind.ORGANIZATION, organization_id, previous_owner_id)
    if old_edge is None:
        old_edge = OrganizationMember(
            user_id=previous_owner_id,
            organization_id=organization_id,
            role=Role.MANAGER.value,
        )
    else:
        old_edge.role = Role.MANAGER.value
    session.add(old_edge)

    org.owner_id = new_owner_id
    session.add(org)
    await session.flush()

    record_event(
        OwnershipTransferred(
            actor_id=actor_id,
            organization_id=organization_id,
            previous_owner_id=previous_owner_id,
            new_owner_id=new_owner_id,
        )
    )
    return org
