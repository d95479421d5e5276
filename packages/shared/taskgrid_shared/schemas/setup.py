from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class SetupState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class SetupAdminRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    display_name: str = Field(min_length=1, max_length=255)
    organization_name: str = Field(default="Default Organization", min_length=1, max_length=255)
    organization_slug: str = Field(default="default", pattern=r"^[a-z0-9][a-z0-9-]{1,62}$")


class SetupStatus(BaseModel):
    state: SetupState
    can_setup: bool
    message: Optional[str] = None


class SetupResult(BaseModel):
    user_id: UUID
    organization_id: UUID
