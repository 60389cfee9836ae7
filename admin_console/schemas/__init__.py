"""Pydantic schemas for API payloads."""

from admin_console.schemas.permission import (
    ActionBundle,
    MatrixRow,
    Page,
    PagePermission,
    PermissionRow,
    ToggleEvent,
    ToggleRequest,
)
from admin_console.schemas.role import (
    EditorSessionCreate,
    EditorSnapshot,
    RoleDeleteRequest,
    RoleDetails,
    RoleListResponse,
    RoleSubmission,
    RoleSubmitRequest,
    StoredRole,
    SubmissionResult,
)

__all__ = [
    "ActionBundle",
    "EditorSessionCreate",
    "EditorSnapshot",
    "MatrixRow",
    "Page",
    "PagePermission",
    "PermissionRow",
    "RoleDeleteRequest",
    "RoleDetails",
    "RoleListResponse",
    "RoleSubmission",
    "RoleSubmitRequest",
    "StoredRole",
    "SubmissionResult",
    "ToggleEvent",
    "ToggleRequest",
]
