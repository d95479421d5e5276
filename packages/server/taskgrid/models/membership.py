"""Membership edges, one table per hierarchy level.

The composite primary key keeps one edge per (user, entity).
"""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from taskgrid_shared.schemas.common import EntityKind

from .base import _utcnow


class OrganizationMember(SQLModel, table=True):
    __tablename__ = "organization_members"

    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    organization_id: uuid.UUID = Field(foreign_key="organizations.id", primary_key=True)
    role: str = Field(nullable=False, default="member")  # owner | manager | member | viewer
    joined_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )


class WorkspaceMember(SQLModel, table=True):
    __tablename__ = "workspace_members"

    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", primary_key=True)
    role: str = Field(nullable=False, default="member")
    joined_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )


class ProjectMember(SQLModel, table=True):
    __tablename__ = "project_members"

    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", primary_key=True)
    role: str = Field(nullable=False, default="member")
    joined_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )


# level -> (edge table, column holding the entity id)
MEMBERSHIP_TABLES = {
    EntityKind.ORGANIZATION: (OrganizationMember, "organization_id"),
    EntityKind.WORKSPACE: (WorkspaceMember, "workspace_id"),
    EntityKind.PROJECT: (ProjectMember, "project_id"),
}


def membership_table(level: EntityKind):
    """Return (model, entity column) for a membership level."""
    try:
        model, column = MEMBERSHIP_TABLES[EntityKind(level)]
    except KeyError:
        raise ValueError(f"No membership table for level '{level}'") from None
    return model, getattr(model, column)
