"""Role editor schemas."""

from __future__ import annotations

from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from admin_console.schemas.permission import ActionBundle, MatrixRow, PagePermission

EditorMode = Literal["create", "update"]


class RolePermissionPayload(BaseModel):
    """Wire shape of one permission inside a role submission."""

    name: str
    actions: ActionBundle


class RoleSubmitRequest(BaseModel):
    """Form-level fields of a role; both are required and non-blank."""

    name: str = Field(..., min_length=1, max_length=120)
    description: str = Field(..., min_length=1, max_length=1024)

    @field_validator("name", "description", mode="before")
    @classmethod
    def strip_whitespace(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value


class RoleSubmission(RoleSubmitRequest):
    """Payload posted to the content API when creating or updating a role."""

    permissions: List[RolePermissionPayload] = Field(default_factory=list)


class StoredRole(BaseModel):
    """Role details as returned by the content API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, alias="_id")
    name: str = ""
    description: str = ""
    default_role: bool = False
    created_at: Optional[str] = None


class RoleListResponse(BaseModel):
    roles: List[StoredRole]
    page: int
    limit: int
    total: Optional[int] = None


class RoleDeleteRequest(BaseModel):
    role_ids: List[str] = Field(..., min_length=1)


class EditorSessionCreate(BaseModel):
    role_id: Optional[str] = Field(default=None, min_length=1)


class EditorSnapshot(BaseModel):
    session_id: UUID
    mode: EditorMode
    role_id: Optional[str] = None
    name: str = ""
    description: str = ""
    rows: List[MatrixRow]


class SubmissionResult(BaseModel):
    success: bool
    mode: EditorMode
    role_id: Optional[str] = None
    requires_relogin: bool = False


class RoleDetails(StoredRole):
    """A stored role together with its persisted page permissions."""

    permissions: List[PagePermission] = Field(default_factory=list)
