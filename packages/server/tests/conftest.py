"""
Shared fixtures: an in-memory tenancy store for the access core, and a
throwaway SQLite database for everything that touches SQL.
"""

import os

os.environ.setdefault("TG_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from taskgrid.access.context import AccessContext
from taskgrid.access.guard import AccessGuard
from taskgrid.core.database import init_db
from taskgrid.services.tenancy_store import SqlTenancyStore

from .factories import TreeBuilder
from .fakes import FakeTenancyStore


@pytest.fixture
def reset_logging():
    """Undo configure_logging so later tests see structlog defaults."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def store():
    return FakeTenancyStore()


@pytest.fixture
def guard(store):
    return AccessGuard(store)


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'taskgrid.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def tree(session):
    return TreeBuilder(session)


@pytest.fixture
def access(session):
    """A fresh request-scoped access context over the SQL store."""
    return AccessContext(AccessGuard(SqlTenancyStore(session)))
