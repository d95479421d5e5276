"""Hierarchical access resolution for the tenancy tree."""

from .context import AccessContext  # noqa: F401
from .elevation import is_elevated  # noqa: F401
from .errors import (  # noqa: F401
    AccessError,
    ForbiddenError,
    NotFoundError,
    TransientStoreError,
)
from .guard import AccessGuard  # noqa: F401
from .resolver import RoleResolution, RoleResolver  # noqa: F401
from .scope import build_scope  # noqa: F401
from .store import TenancyStore  # noqa: F401
