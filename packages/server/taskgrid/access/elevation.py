"""The single definition of administrative elevation."""

from typing import Optional

from taskgrid_shared.schemas.common import Role

ELEVATED_ROLES = frozenset({Role.OWNER, Role.MANAGER})


def is_elevated(role: Optional[Role]) -> bool:
    """OWNER and MANAGER are elevated; everything else, including no role, is not."""
    return role in ELEVATED_ROLES
