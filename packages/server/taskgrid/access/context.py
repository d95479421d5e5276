"""
Request-scoped memoization of access results.

One ``AccessContext`` lives for exactly one request and is then discarded; it
is never shared between users or requests. Concurrent identical lookups
through the same context await one in-flight resolution. Failures are not
remembered, so a later call retries against the store.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Optional

from taskgrid_shared.schemas.access import AccessResult
from taskgrid_shared.schemas.common import EntityKind

from .guard import AccessGuard

_Key = tuple[EntityKind, uuid.UUID, uuid.UUID]


class AccessContext:
    def __init__(self, guard: AccessGuard):
        self.guard = guard
        self._results: dict[_Key, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._results)

    async def access(
        self,
        kind: EntityKind | str,
        entity_id: uuid.UUID,
        user_id: uuid.UUID,
        *,
        organization_hint: Optional[uuid.UUID] = None,
    ) -> AccessResult:
        key = (EntityKind(kind), entity_id, user_id)
        pending = self._results.get(key)
        if pending is not None:
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                # The resolving caller was cancelled, not this one: resolve afresh.
                if pending.cancelled() and not asyncio.current_task().cancelling():
                    return await self.access(
                        kind, entity_id, user_id, organization_hint=organization_hint
                    )
                raise

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._results[key] = future
        try:
            result = await self.guard.get_resource_access(
                key[0], entity_id, user_id, organization_hint=organization_hint
            )
        except asyncio.CancelledError:
            del self._results[key]
            future.cancel()
            raise
        except Exception as exc:
            del self._results[key]
            future.set_exception(exc)
            # Waiters re-raise it; retrieve here so an unawaited future stays quiet.
            future.exception()
            raise
        future.set_result(result)
        return result

    async def organization(self, organization_id: uuid.UUID, user_id: uuid.UUID) -> AccessResult:
        return await self.access(EntityKind.ORGANIZATION, organization_id, user_id)

    async def workspace(self, workspace_id: uuid.UUID, user_id: uuid.UUID, **kw) -> AccessResult:
        return await self.access(EntityKind.WORKSPACE, workspace_id, user_id, **kw)

    async def project(self, project_id: uuid.UUID, user_id: uuid.UUID, **kw) -> AccessResult:
        return await self.access(EntityKind.PROJECT, project_id, user_id, **kw)

    async def task(self, task_id: uuid.UUID, user_id: uuid.UUID, **kw) -> AccessResult:
        return await self.access(EntityKind.TASK, task_id, user_id, **kw)
