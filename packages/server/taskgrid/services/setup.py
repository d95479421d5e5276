"""
One-time initial setup: the first user and the organization they own.

Concurrent setup attempts, across processes as well as within one, are
serialized by a single ``system_setup`` row whose state moves
NOT_STARTED -> IN_PROGRESS -> DONE through conditional UPDATEs. A claim that
stays IN_PROGRESS longer than ``stale_after`` (a crashed setup) may be taken
over by the next attempt.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy import and_, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from taskgrid.access.errors import SetupAlreadyCompletedError, SetupConflictError
from taskgrid.core.config import get_settings
from taskgrid.core.security import hash_password
from taskgrid.models.membership import OrganizationMember
from taskgrid.models.organization import Organization
from taskgrid.models.setup_state import SETUP_ROW_ID, SystemSetup
from taskgrid.models.user import User
from taskgrid.services.audit import record_event
from taskgrid_shared.schemas.common import Role
from taskgrid_shared.schemas.events import SetupCompleted
from taskgrid_shared.schemas.setup import SetupAdminRequest, SetupResult, SetupState, SetupStatus

log = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SetupClaim:
    token: uuid.UUID
    completed: bool = False


class SetupGuard:
    """Persisted single-flight guard for initial setup."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        stale_after: Optional[timedelta] = None,
    ):
        self._session_factory = session_factory
        self._stale_after = stale_after

    async def state(self) -> SetupState:
        async with self._session_factory() as session:
            row = await session.get(SystemSetup, SETUP_ROW_ID)
            return SetupState(row.state) if row else SetupState.NOT_STARTED

    async def _ensure_row(self) -> None:
        async with self._session_factory() as session:
            if await session.get(SystemSetup, SETUP_ROW_ID) is not None:
                return
            session.add(SystemSetup(id=SETUP_ROW_ID, state=SetupState.NOT_STARTED.value))
            try:
                await session.commit()
            except IntegrityError:
                # Inserted concurrently by another process; the row is there now.
                await session.rollback()

    async def acquire(self) -> SetupClaim:
        """Move NOT_STARTED (or a stale IN_PROGRESS) to IN_PROGRESS, or raise."""
        await self._ensure_row()
        claim = SetupClaim(token=uuid.uuid4())
        now = _utcnow()

        claimable = SystemSetup.state == SetupState.NOT_STARTED.value
        if self._stale_after is not None:
            claimable = or_(
                claimable,
                and_(
                    SystemSetup.state == SetupState.IN_PROGRESS.value,
                    SystemSetup.started_at < now - self._stale_after,
                ),
            )

        async with self._session_factory() as session:
            result = await session.execute(
                update(SystemSetup)
                .where(SystemSetup.id == SETUP_ROW_ID, claimable)
                .values(
                    state=SetupState.IN_PROGRESS.value,
                    claim_token=claim.token,
                    started_at=now,
                    completed_at=None,
                )
            )
            claimed = result.rowcount == 1
            await session.commit()

        if not claimed:
            current = await self.state()
            log.info("setup.claim_rejected", state=current.value)
            if current is SetupState.DONE:
                raise SetupAlreadyCompletedError()
            raise SetupConflictError(current)

        log.info("setup.claimed", claim=str(claim.token))
        return claim

    async def complete(self, claim: SetupClaim, session: Optional[AsyncSession] = None) -> None:
        """Mark setup DONE.

        With ``session``, the transition joins that session's pending work and
        this method commits it. The claim only counts as completed once the
        commit has succeeded; otherwise ``hold`` still releases it.
        """
        stmt = (
            update(SystemSetup)
            .where(
                SystemSetup.id == SETUP_ROW_ID,
                SystemSetup.state == SetupState.IN_PROGRESS.value,
                SystemSetup.claim_token == claim.token,
            )
            .values(state=SetupState.DONE.value, completed_at=_utcnow())
        )
        if session is not None:
            updated = (await session.execute(stmt)).rowcount
            if updated == 1:
                await session.commit()
        else:
            async with self._session_factory() as own:
                updated = (await own.execute(stmt)).rowcount
                await own.commit()

        if updated != 1:
            raise SetupConflictError(SetupState.IN_PROGRESS, "Setup claim was lost to another process")
        claim.completed = True
        log.info("setup.completed", claim=str(claim.token))

    async def release(self, claim: SetupClaim) -> None:
        """Return an unfinished claim to NOT_STARTED."""
        async with self._session_factory() as session:
            await session.execute(
                update(SystemSetup)
                .where(
                    SystemSetup.id == SETUP_ROW_ID,
                    SystemSetup.state == SetupState.IN_PROGRESS.value,
                    SystemSetup.claim_token == claim.token,
                )
                .values(state=SetupState.NOT_STARTED.value, claim_token=None, started_at=None)
            )
            await session.commit()
        log.info("setup.released", claim=str(claim.token))

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[SetupClaim]:
        """Acquire a claim; release it unless the body completed it."""
        claim = await self.acquire()
        try:
            yield claim
        finally:
            if not claim.completed:
                await self.release(claim)


def default_guard(session_factory: async_sessionmaker[AsyncSession]) -> SetupGuard:
    settings = get_settings()
    return SetupGuard(
        session_factory,
        stale_after=timedelta(seconds=settings.setup_stale_after_seconds),
    )


async def _user_count(session: AsyncSession) -> int:
    return await session.scalar(select(func.count()).select_from(User)) or 0


async def get_setup_status(session_factory: async_sessionmaker[AsyncSession]) -> SetupStatus:
    guard = default_guard(session_factory)
    state = await guard.state()
    if state is SetupState.IN_PROGRESS:
        return SetupStatus(state=state, can_setup=False, message="Setup is currently in progress")
    if state is SetupState.DONE:
        return SetupStatus(state=state, can_setup=False, message="System setup has already been completed")

    async with session_factory() as session:
        if await _user_count(session) > 0:
            return SetupStatus(
                state=state, can_setup=False, message="System setup has already been completed"
            )
    return SetupStatus(state=state, can_setup=True)


async def setup_initial_admin(
    session_factory: async_sessionmaker[AsyncSession],
    req: SetupAdminRequest,
    *,
    guard: Optional[SetupGuard] = None,
) -> SetupResult:
    """Create the first user and make them owner of the first organization."""
    guard = guard or default_guard(session_factory)

    async with guard.hold() as claim:
        async with session_factory() as session:
            if await _user_count(session) > 0:
                # Users were created some other way; setup can never run now.
                await guard.complete(claim, session)
                raise SetupAlreadyCompletedError()

            log.info("setup.creating_admin", email=req.email)
            user = User(
                email=req.email,
                display_name=req.display_name,
                password_hash=hash_password(req.password),
            )
            session.add(user)
            await session.flush()

            org = Organization(
                name=req.organization_name,
                slug=req.organization_slug,
                owner_id=user.id,
            )
            session.add(org)
            await session.flush()

            session.add(
                OrganizationMember(user_id=user.id, organization_id=org.id, role=Role.OWNER.value)
            )
            await session.flush()

            await guard.complete(claim, session)

    record_event(SetupCompleted(actor_id=user.id, admin_user_id=user.id, organization_id=org.id))
    return SetupResult(user_id=user.id, organization_id=org.id)
