"""Business logic service layer."""

from admin_console.services.content_api import ContentApiClient  # noqa: F401
from admin_console.services.permission_matrix import PermissionMatrix  # noqa: F401
from admin_console.services.role_editor import RoleEditor  # noqa: F401
from admin_console.services.sessions import EditorSessionRegistry  # noqa: F401
