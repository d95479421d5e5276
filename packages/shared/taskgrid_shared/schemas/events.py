"""Audit payloads describing what changed, one closed variant per event kind."""

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, TypeAdapter

from .common import EntityKind, Role


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _AuditEventBase(BaseModel):
    actor_id: Optional[UUID] = None
    occurred_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True, "extra": "forbid"}


class MemberAdded(_AuditEventBase):
    type: Literal["member.added"] = "member.added"
    level: EntityKind
    entity_id: UUID
    user_id: UUID
    role: Role


class MemberRoleChanged(_AuditEventBase):
    type: Literal["member.role_changed"] = "member.role_changed"
    level: EntityKind
    entity_id: UUID
    user_id: UUID
    previous_role: Role
    new_role: Role


class MemberRemoved(_AuditEventBase):
    type: Literal["member.removed"] = "member.removed"
    level: EntityKind
    entity_id: UUID
    user_id: UUID
    previous_role: Role


class OwnershipTransferred(_AuditEventBase):
    type: Literal["organization.ownership_transferred"] = "organization.ownership_transferred"
    organization_id: UUID
    previous_owner_id: UUID
    new_owner_id: UUID


class SetupCompleted(_AuditEventBase):
    type: Literal["system.setup_completed"] = "system.setup_completed"
    admin_user_id: UUID
    organization_id: UUID


AuditEvent = Annotated[
    Union[MemberAdded, MemberRoleChanged, MemberRemoved, OwnershipTransferred, SetupCompleted],
    Field(discriminator="type"),
]

audit_event_adapter: TypeAdapter = TypeAdapter(AuditEvent)
