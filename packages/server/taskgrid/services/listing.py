"""
Scoped listings: the read paths that consume AccessGuard + build_scope.

Each listing authorizes the caller on the parent it ranges over, asks the
scope builder for the filter matching that elevation, and lets
``apply_scope`` turn it into SQL.
"""

from __future__ import annotations

import uuid
from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskgrid.access.context import AccessContext
from taskgrid.access.scope import build_scope
from taskgrid.models.organization import Organization
from taskgrid.models.project import Project
from taskgrid.models.task import Task
from taskgrid.models.workspace import Workspace
from taskgrid.services.scoping import apply_scope
from taskgrid_shared.schemas.common import EntityKind

log = structlog.get_logger()


async def list_organizations(session: AsyncSession, user_id: uuid.UUID) -> Sequence[Organization]:
    """Organizations the user owns or belongs to."""
    predicate = build_scope(EntityKind.ORGANIZATION, user_id, is_elevated=False)
    stmt = apply_scope(select(Organization), predicate).order_by(Organization.name)
    result = await session.execute(stmt)
    return result.scalars().all()


async def list_workspaces(
    session: AsyncSession,
    access: AccessContext,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Sequence[Workspace]:
    granted = await access.organization(organization_id, user_id)
    predicate = build_scope(EntityKind.WORKSPACE, user_id, is_elevated=granted.is_elevated)
    stmt = apply_scope(
        select(Workspace).where(Workspace.organization_id == organization_id), predicate
    ).order_by(Workspace.name)
    result = await session.execute(stmt)
    return result.scalars().all()


async def list_projects(
    session: AsyncSession,
    access: AccessContext,
    workspace_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Sequence[Project]:
    granted = await access.workspace(workspace_id, user_id)
    predicate = build_scope(EntityKind.PROJECT, user_id, is_elevated=granted.is_elevated)
    stmt = apply_scope(
        select(Project).where(Project.workspace_id == workspace_id), predicate
    ).order_by(Project.name)
    result = await session.execute(stmt)
    return result.scalars().all()


async def list_tasks(
    session: AsyncSession,
    access: AccessContext,
    project_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Sequence[Task]:
    """Tasks of one project; non-elevated callers only see their own."""
    granted = await access.project(project_id, user_id)
    predicate = build_scope(EntityKind.TASK, user_id, is_elevated=granted.is_elevated)
    stmt = apply_scope(
        select(Task).where(Task.project_id == project_id), predicate
    ).order_by(Task.created_at, Task.id)
    result = await session.execute(stmt)
    return result.scalars().all()


async def list_organization_tasks(
    session: AsyncSession,
    access: AccessContext,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Sequence[Task]:
    """Tasks across every project of an organization."""
    granted = await access.organization(organization_id, user_id)

    project_rows = await session.execute(
        select(Project.id)
        .join(Workspace, Workspace.id == Project.workspace_id)
        .where(Workspace.organization_id == organization_id)
    )
    project_ids = [row[0] for row in project_rows.all()]

    predicate = build_scope(
        EntityKind.TASK, user_id, is_elevated=granted.is_elevated, within=project_ids
    )
    stmt = apply_scope(
        select(Task).where(Task.project_id.in_(project_ids)), predicate
    ).order_by(Task.created_at, Task.id)
    result = await session.execute(stmt)
    tasks = result.scalars().all()
    log.debug(
        "listing.organization_tasks",
        organization_id=str(organization_id),
        user_id=str(user_id),
        elevated=granted.is_elevated,
        projects=len(project_ids),
        returned=len(tasks),
    )
    return tasks
