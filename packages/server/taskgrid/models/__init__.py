# SQLModel definitions, imported here so create_all sees every table.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .organization import Organization  # noqa: F401
from .workspace import Workspace  # noqa: F401
from .project import Project  # noqa: F401
from .task import Task  # noqa: F401
from .membership import OrganizationMember, WorkspaceMember, ProjectMember  # noqa: F401
from .setup_state import SystemSetup  # noqa: F401
