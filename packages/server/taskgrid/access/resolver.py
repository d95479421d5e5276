"""
Role resolution along the Organization -> Workspace -> Project -> Task chain.

Existence is established first, once per resolution, by walking parent
pointers upward from the target. Role lookups only start after that walk
succeeds, so a missing entity always fails with NotFound before any
membership row is read.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Awaitable, Optional, TypeVar

import structlog

from taskgrid_shared.schemas.common import MEMBERSHIP_LEVELS, EntityKind, Role, RoleSource

from .errors import AccessError, NotFoundError, TransientStoreError
from .store import OrganizationRecord, TaskIdentity, TenancyStore

log = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RoleResolution:
    role: Optional[Role]
    source: RoleSource

    @property
    def granted(self) -> bool:
        return self.source is not RoleSource.NONE


NO_ROLE = RoleResolution(role=None, source=RoleSource.NONE)
OWNERSHIP = RoleResolution(role=Role.OWNER, source=RoleSource.OWNERSHIP)


@dataclass(frozen=True)
class HierarchyChain:
    """Identity of one entity plus every ancestor, as loaded from the store."""

    kind: EntityKind
    entity_id: uuid.UUID
    organization: OrganizationRecord
    workspace_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    task: Optional[TaskIdentity] = None

    @property
    def organization_id(self) -> uuid.UUID:
        return self.organization.id

    def membership_levels(self) -> list[tuple[EntityKind, uuid.UUID]]:
        """(level, entity id) for every level of the chain that has membership edges."""
        ids = {
            EntityKind.ORGANIZATION: self.organization.id,
            EntityKind.WORKSPACE: self.workspace_id,
            EntityKind.PROJECT: self.project_id,
        }
        return [(level, ids[level]) for level in MEMBERSHIP_LEVELS if ids[level] is not None]


class RoleResolver:
    """Resolves the role a user holds at each level of an entity's chain."""

    def __init__(self, store: TenancyStore):
        self._store = store

    async def _call(self, lookup: Awaitable[T]) -> T:
        try:
            return await lookup
        except AccessError:
            raise
        except Exception as exc:
            log.warning("access.store_lookup_failed", error=str(exc), error_type=type(exc).__name__)
            raise TransientStoreError(f"Tenancy lookup failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Existence
    # ------------------------------------------------------------------

    async def _organization(self, organization_id: uuid.UUID) -> OrganizationRecord:
        org = await self._call(self._store.get_organization(organization_id))
        if org is None:
            raise NotFoundError(EntityKind.ORGANIZATION, organization_id)
        return org

    async def _workspace_org(self, workspace_id: uuid.UUID) -> uuid.UUID:
        parent = await self._call(self._store.get_workspace_parent(workspace_id))
        if parent is None:
            raise NotFoundError(EntityKind.WORKSPACE, workspace_id)
        return parent.organization_id

    async def _project_workspace(self, project_id: uuid.UUID) -> uuid.UUID:
        parent = await self._call(self._store.get_project_parent(project_id))
        if parent is None:
            raise NotFoundError(EntityKind.PROJECT, project_id)
        return parent.workspace_id

    async def load_chain(self, kind: EntityKind, entity_id: uuid.UUID) -> HierarchyChain:
        """Walk parent pointers up to the organization, failing NotFound on any gap."""
        kind = EntityKind(kind)
        task: Optional[TaskIdentity] = None
        project_id: Optional[uuid.UUID] = None
        workspace_id: Optional[uuid.UUID] = None

        if kind is EntityKind.TASK:
            task = await self._call(self._store.get_task_identity(entity_id))
            if task is None:
                raise NotFoundError(EntityKind.TASK, entity_id)
            project_id = task.project_id
        elif kind is EntityKind.PROJECT:
            project_id = entity_id

        if project_id is not None:
            workspace_id = await self._project_workspace(project_id)
        elif kind is EntityKind.WORKSPACE:
            workspace_id = entity_id

        if workspace_id is not None:
            organization_id = await self._workspace_org(workspace_id)
        else:
            organization_id = entity_id

        organization = await self._organization(organization_id)
        return HierarchyChain(
            kind=kind,
            entity_id=entity_id,
            organization=organization,
            workspace_id=workspace_id,
            project_id=project_id,
            task=task,
        )

    # ------------------------------------------------------------------
    # Roles
    # ------------------------------------------------------------------

    async def _membership(
        self, level: EntityKind, entity_id: uuid.UUID, user_id: uuid.UUID
    ) -> RoleResolution:
        edge = await self._call(self._store.get_membership(level, user_id, entity_id))
        if edge is None:
            return NO_ROLE
        return RoleResolution(role=Role(edge.role), source=RoleSource.MEMBERSHIP)

    async def resolve(
        self, level: EntityKind, entity_id: uuid.UUID, user_id: uuid.UUID
    ) -> RoleResolution:
        """Highest hierarchy grant the user holds directly at ``level`` on ``entity_id``.

        Returns ``NO_ROLE`` when there is none; that is not a failure.
        """
        level = EntityKind(level)
        if level is EntityKind.TASK:
            raise ValueError("Tasks carry no membership; resolve their project instead")

        if level is EntityKind.ORGANIZATION:
            org = await self._organization(entity_id)
            if org.owner_id == user_id:
                return OWNERSHIP
        elif level is EntityKind.WORKSPACE:
            await self._workspace_org(entity_id)
        else:
            await self._project_workspace(entity_id)

        return await self._membership(level, entity_id, user_id)

    async def resolve_chain(
        self, chain: HierarchyChain, user_id: uuid.UUID
    ) -> dict[EntityKind, RoleResolution]:
        """Resolve every membership level of an already-loaded chain.

        Organization ownership short-circuits. Otherwise the per-level
        membership lookups are independent and run concurrently.
        """
        if chain.organization.owner_id == user_id:
            return {EntityKind.ORGANIZATION: OWNERSHIP}

        levels = chain.membership_levels()
        results = await asyncio.gather(
            *(self._membership(level, entity_id, user_id) for level, entity_id in levels)
        )
        return {level: res for (level, _), res in zip(levels, results)}
