"""
SQL implementation of the tenancy read interface used by the access core.

Each lookup selects only the columns the decision needs. Lookups share the
request's session so they see its uncommitted writes; an AsyncSession allows
one operation at a time, so concurrent lookups queue on a lock.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from taskgrid.access.errors import TransientStoreError
from taskgrid.access.store import (
    MembershipRecord,
    OrganizationRecord,
    ProjectParent,
    TaskIdentity,
    WorkspaceParent,
)
from taskgrid.models.membership import membership_table
from taskgrid.models.organization import Organization
from taskgrid.models.project import Project
from taskgrid.models.task import Task
from taskgrid.models.workspace import Workspace
from taskgrid_shared.schemas.common import EntityKind, Role


class SqlTenancyStore:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._lock = asyncio.Lock()

    async def _first(self, stmt):
        try:
            async with self._lock:
                result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise TransientStoreError(f"Tenancy lookup failed: {exc}") from exc
        return result.first()

    async def get_organization(self, organization_id: uuid.UUID) -> Optional[OrganizationRecord]:
        row = await self._first(
            select(Organization.id, Organization.owner_id).where(Organization.id == organization_id)
        )
        return OrganizationRecord(id=row.id, owner_id=row.owner_id) if row else None

    async def get_membership(
        self, level: EntityKind, user_id: uuid.UUID, entity_id: uuid.UUID
    ) -> Optional[MembershipRecord]:
        model, entity_col = membership_table(level)
        row = await self._first(
            select(model.role).where(model.user_id == user_id, entity_col == entity_id)
        )
        return MembershipRecord(role=Role(row.role)) if row else None

    async def get_workspace_parent(self, workspace_id: uuid.UUID) -> Optional[WorkspaceParent]:
        row = await self._first(
            select(Workspace.id, Workspace.organization_id).where(Workspace.id == workspace_id)
        )
        return WorkspaceParent(id=row.id, organization_id=row.organization_id) if row else None

    async def get_project_parent(self, project_id: uuid.UUID) -> Optional[ProjectParent]:
        row = await self._first(
            select(Project.id, Project.workspace_id).where(Project.id == project_id)
        )
        return ProjectParent(id=row.id, workspace_id=row.workspace_id) if row else None

    async def get_task_identity(self, task_id: uuid.UUID) -> Optional[TaskIdentity]:
        row = await self._first(
            select(
                Task.id,
                Task.project_id,
                Task.assignee_id,
                Task.reporter_id,
                Task.created_by,
            ).where(Task.id == task_id)
        )
        if not row:
            return None
        return TaskIdentity(
            id=row.id,
            project_id=row.project_id,
            assignee_id=row.assignee_id,
            reporter_id=row.reporter_id,
            created_by=row.created_by,
        )
