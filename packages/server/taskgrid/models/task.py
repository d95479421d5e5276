"""Task model."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Task(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    description: Optional[str] = None
    status: str = Field(nullable=False, default="todo")  # todo | in-progress | done
    # Identity fields: each grants access to this task on its own
    assignee_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)
    reporter_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)
    created_by: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
