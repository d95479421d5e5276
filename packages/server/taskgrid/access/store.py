"""
Read interface the access core consumes from the persistence layer.

Every lookup returns ``None`` when the row is absent; turning absence into
``NotFoundError`` is the resolver's job. I/O failures surface as
``TransientStoreError``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional, Protocol

from taskgrid_shared.schemas.common import EntityKind, Role


@dataclass(frozen=True)
class OrganizationRecord:
    id: uuid.UUID
    owner_id: uuid.UUID


@dataclass(frozen=True)
class MembershipRecord:
    role: Role


@dataclass(frozen=True)
class WorkspaceParent:
    id: uuid.UUID
    organization_id: uuid.UUID


@dataclass(frozen=True)
class ProjectParent:
    id: uuid.UUID
    workspace_id: uuid.UUID


@dataclass(frozen=True)
class TaskIdentity:
    id: uuid.UUID
    project_id: uuid.UUID
    assignee_id: Optional[uuid.UUID]
    reporter_id: Optional[uuid.UUID]
    created_by: Optional[uuid.UUID]

    def grants(self, user_id: uuid.UUID) -> bool:
        """True when the user is the assignee, reporter or creator."""
        return user_id in (self.assignee_id, self.reporter_id, self.created_by)


class TenancyStore(Protocol):
    async def get_organization(self, organization_id: uuid.UUID) -> Optional[OrganizationRecord]: ...

    async def get_membership(
        self, level: EntityKind, user_id: uuid.UUID, entity_id: uuid.UUID
    ) -> Optional[MembershipRecord]: ...

    async def get_workspace_parent(self, workspace_id: uuid.UUID) -> Optional[WorkspaceParent]: ...

    async def get_project_parent(self, project_id: uuid.UUID) -> Optional[ProjectParent]: ...

    async def get_task_identity(self, task_id: uuid.UUID) -> Optional[TaskIdentity]: ...
