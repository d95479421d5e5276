from enum import Enum
from typing import Optional


class Role(str, Enum):
    OWNER = "owner"
    MANAGER = "manager"
    MEMBER = "member"
    VIEWER = "viewer"

    @property
    def rank(self) -> int:
        """Position in ROLE_ORDER; higher outranks lower."""
        return len(ROLE_ORDER) - ROLE_ORDER.index(self)


# Highest first
ROLE_ORDER: list["Role"] = [
    Role.OWNER,
    Role.MANAGER,
    Role.MEMBER,
    Role.VIEWER,
]


def highest_role(*roles: Optional[Role]) -> Optional[Role]:
    """Return the highest-ranking role, ignoring missing ones."""
    present = [r for r in roles if r is not None]
    if not present:
        return None
    return max(present, key=lambda r: r.rank)


class EntityKind(str, Enum):
    ORGANIZATION = "organization"
    WORKSPACE = "workspace"
    PROJECT = "project"
    TASK = "task"


# Levels that carry membership edges, root first. Tasks have none.
MEMBERSHIP_LEVELS: list["EntityKind"] = [
    EntityKind.ORGANIZATION,
    EntityKind.WORKSPACE,
    EntityKind.PROJECT,
]


class RoleSource(str, Enum):
    OWNERSHIP = "ownership"
    MEMBERSHIP = "membership"
    ENTITY = "entity"
    NONE = "none"


# Task row fields that grant access to that one task
TASK_IDENTITY_FIELDS: tuple[str, ...] = ("assignee_id", "reporter_id", "created_by")
