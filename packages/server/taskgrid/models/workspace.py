"""Workspace model."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Workspace(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "workspaces"
    __table_args__ = (sa.UniqueConstraint("organization_id", "slug"),)

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    slug: str = Field(nullable=False)
    created_by: uuid.UUID = Field(foreign_key="users.id", nullable=False)
