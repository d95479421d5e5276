from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from .common import EntityKind, Role


class MemberAdd(BaseModel):
    user_id: UUID
    role: Role = Role.MEMBER


class MemberRoleUpdate(BaseModel):
    role: Role


class OwnershipTransfer(BaseModel):
    new_owner_id: UUID


class MemberRead(BaseModel):
    level: EntityKind
    entity_id: UUID
    user_id: UUID
    role: Role
    display_name: Optional[str] = None

    model_config = {"from_attributes": True}
