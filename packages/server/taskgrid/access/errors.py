"""
Failure taxonomy for access resolution and the guard rules built on it.

NotFound and Forbidden are authorization outcomes. TransientStoreError is not:
it means a lookup failed and is surfaced as-is. None of them are retried here.
"""

from __future__ import annotations

import uuid
from typing import Optional

from taskgrid_shared.schemas.common import EntityKind
from taskgrid_shared.schemas.setup import SetupState


class AccessError(Exception):
    """Base class for every error raised by the access layer."""

    code = "ACCESS_ERROR"


class NotFoundError(AccessError):
    code = "NOT_FOUND"

    def __init__(self, entity_kind: EntityKind | str, entity_id: uuid.UUID):
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        label = getattr(entity_kind, "value", entity_kind)
        super().__init__(f"{label.replace('_', ' ').capitalize()} not found")


class MembershipNotFoundError(NotFoundError):
    def __init__(self, level: EntityKind, entity_id: uuid.UUID, user_id: uuid.UUID):
        self.user_id = user_id
        super().__init__(f"{level.value}_member", entity_id)
        self.level = level


class ForbiddenError(AccessError):
    code = "FORBIDDEN"

    def __init__(
        self,
        entity_kind: EntityKind,
        entity_id: uuid.UUID,
        user_id: uuid.UUID,
        message: Optional[str] = None,
    ):
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        self.user_id = user_id
        super().__init__(message or f"Not a member of this {entity_kind.value}")


class TransientStoreError(AccessError):
    """A tenancy lookup failed at the I/O level."""

    code = "STORE_UNAVAILABLE"


class RuleViolationError(AccessError):
    """The caller is authorized but the mutation breaks a tenancy rule."""

    code = "RULE_VIOLATION"


class OwnershipDemotionError(RuleViolationError):
    code = "OWNER_DEMOTION"

    def __init__(self, organization_id: uuid.UUID, owner_id: uuid.UUID):
        self.organization_id = organization_id
        self.owner_id = owner_id
        super().__init__("Cannot change the role of the organization owner")


class OwnerRemovalError(RuleViolationError):
    code = "OWNER_REMOVAL"

    def __init__(self, organization_id: uuid.UUID, owner_id: uuid.UUID):
        self.organization_id = organization_id
        self.owner_id = owner_id
        super().__init__("Cannot remove the organization owner from the organization")


class MembershipConflictError(RuleViolationError):
    code = "MEMBERSHIP_EXISTS"

    def __init__(self, level: EntityKind, entity_id: uuid.UUID, user_id: uuid.UUID):
        self.level = level
        self.entity_id = entity_id
        self.user_id = user_id
        super().__init__(f"User is already a member of this {level.value}")


class SetupConflictError(AccessError):
    code = "SETUP_IN_PROGRESS"

    def __init__(self, state: SetupState, message: Optional[str] = None):
        self.state = state
        super().__init__(message or "Setup is already in progress")


class SetupAlreadyCompletedError(SetupConflictError):
    code = "SETUP_COMPLETED"

    def __init__(self):
        super().__init__(SetupState.DONE, "System setup has already been completed")
