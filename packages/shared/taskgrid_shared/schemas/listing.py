from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class OrganizationRead(BaseModel):
    id: UUID
    name: str
    slug: str
    owner_id: UUID

    model_config = {"from_attributes": True}


class WorkspaceRead(BaseModel):
    id: UUID
    organization_id: UUID
    name: str
    slug: str

    model_config = {"from_attributes": True}


class ProjectRead(BaseModel):
    id: UUID
    workspace_id: UUID
    name: str
    slug: str

    model_config = {"from_attributes": True}


class TaskRead(BaseModel):
    id: UUID
    project_id: UUID
    title: str
    status: str
    assignee_id: Optional[UUID] = None
    reporter_id: Optional[UUID] = None
    created_by: UUID
    created_at: datetime

    model_config = {"from_attributes": True}
