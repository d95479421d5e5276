"""Builders for rows of the tenancy tree in a test database."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taskgrid.models.membership import membership_table
from taskgrid.models.organization import Organization
from taskgrid.models.project import Project
from taskgrid.models.task import Task
from taskgrid.models.user import User
from taskgrid.models.workspace import Workspace
from taskgrid_shared.schemas.common import EntityKind, Role


def _suffix() -> str:
    return uuid.uuid4().hex[:8]


class TreeBuilder:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def user(self, name: str = "user") -> User:
        return await self._save(User(email=f"{name}-{_suffix()}@example.com", display_name=name))

    async def organization(self, owner: User, name: str = "Org") -> Organization:
        return await self._save(Organization(name=name, slug=f"org-{_suffix()}", owner_id=owner.id))

    async def workspace(self, org: Organization, name: str = "Workspace") -> Workspace:
        return await self._save(
            Workspace(organization_id=org.id, name=name, slug=f"ws-{_suffix()}", created_by=org.owner_id)
        )

    async def project(self, ws: Workspace, creator: User, name: str = "Project") -> Project:
        return await self._save(
            Project(workspace_id=ws.id, name=name, slug=f"p-{_suffix()}", created_by=creator.id)
        )

    async def task(
        self,
        project: Project,
        *,
        created_by: User,
        assignee: Optional[User] = None,
        reporter: Optional[User] = None,
        title: str = "Task",
    ) -> Task:
        return await self._save(
            Task(
                project_id=project.id,
                title=title,
                created_by=created_by.id,
                assignee_id=assignee.id if assignee else None,
                reporter_id=reporter.id if reporter else None,
            )
        )

    async def member(self, level: EntityKind, entity, user: User, role: Role):
        model, entity_col = membership_table(level)
        return await self._save(model(user_id=user.id, role=role.value, **{entity_col.key: entity.id}))
