"""
AccessGuard: the one entry point feature services use to authorize a user
against an entity in the tenancy hierarchy.

Every call is independent:
1. load the entity's identity chain (NotFound if any link is missing),
2. resolve ownership or membership at every level of the chain,
3. add the task's own identity grant when the target is a task,
4. grant if any source holds, otherwise raise Forbidden.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog

from taskgrid_shared.schemas.access import AccessResult
from taskgrid_shared.schemas.common import EntityKind, RoleSource, highest_role

from .elevation import is_elevated
from .errors import ForbiddenError
from .resolver import HierarchyChain, RoleResolution, RoleResolver
from .store import TenancyStore

log = structlog.get_logger()


class AccessGuard:
    def __init__(self, store: TenancyStore):
        self._resolver = RoleResolver(store)

    @property
    def resolver(self) -> RoleResolver:
        return self._resolver

    async def get_organization_access(
        self, organization_id: uuid.UUID, user_id: uuid.UUID
    ) -> AccessResult:
        return await self._access(EntityKind.ORGANIZATION, organization_id, user_id, None)

    async def get_workspace_access(
        self,
        workspace_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        organization_hint: Optional[uuid.UUID] = None,
    ) -> AccessResult:
        return await self._access(EntityKind.WORKSPACE, workspace_id, user_id, organization_hint)

    async def get_project_access(
        self,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        organization_hint: Optional[uuid.UUID] = None,
    ) -> AccessResult:
        return await self._access(EntityKind.PROJECT, project_id, user_id, organization_hint)

    async def get_task_access(
        self,
        task_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        organization_hint: Optional[uuid.UUID] = None,
    ) -> AccessResult:
        return await self._access(EntityKind.TASK, task_id, user_id, organization_hint)

    async def get_resource_access(
        self,
        kind: EntityKind | str,
        entity_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        organization_hint: Optional[uuid.UUID] = None,
    ) -> AccessResult:
        """Dispatch on entity kind. Unknown kinds raise ValueError."""
        try:
            kind = EntityKind(kind)
        except ValueError:
            valid = ", ".join(k.value for k in EntityKind)
            raise ValueError(f"Invalid scope: {kind}. Must be one of: {valid}") from None
        return await self._access(kind, entity_id, user_id, organization_hint)

    # ------------------------------------------------------------------

    def _check_hint(self, chain: HierarchyChain, hint: Optional[uuid.UUID]) -> None:
        # The chain is authoritative; a caller-supplied org id never is.
        if hint is not None and hint != chain.organization_id:
            log.warning(
                "access.organization_hint_mismatch",
                entity_kind=chain.kind.value,
                entity_id=str(chain.entity_id),
                hinted=str(hint),
                derived=str(chain.organization_id),
            )

    async def _access(
        self,
        kind: EntityKind,
        entity_id: uuid.UUID,
        user_id: uuid.UUID,
        organization_hint: Optional[uuid.UUID],
    ) -> AccessResult:
        chain = await self._resolver.load_chain(kind, entity_id)
        self._check_hint(chain, organization_hint)

        resolutions = await self._resolver.resolve_chain(chain, user_id)
        role = highest_role(*(r.role for r in resolutions.values()))
        entity_grant = chain.task is not None and chain.task.grants(user_id)

        if role is None and not entity_grant:
            log.info(
                "access.forbidden",
                entity_kind=kind.value,
                entity_id=str(entity_id),
                user_id=str(user_id),
            )
            raise ForbiddenError(kind, entity_id, user_id)

        result = AccessResult(
            is_elevated=is_elevated(role),
            role=role,
            source=_source(resolutions, entity_grant),
            entity_kind=kind,
            entity_id=entity_id,
            user_id=user_id,
            via_entity_grant=entity_grant,
        )
        log.debug(
            "access.granted",
            entity_kind=kind.value,
            entity_id=str(entity_id),
            user_id=str(user_id),
            role=role.value if role else None,
            source=result.source.value,
            elevated=result.is_elevated,
        )
        return result


def _source(resolutions: dict[EntityKind, RoleResolution], entity_grant: bool) -> RoleSource:
    sources = {r.source for r in resolutions.values()}
    if RoleSource.OWNERSHIP in sources:
        return RoleSource.OWNERSHIP
    if RoleSource.MEMBERSHIP in sources:
        return RoleSource.MEMBERSHIP
    if entity_grant:
        return RoleSource.ENTITY
    return RoleSource.NONE
