"""Role create/update editing session."""

from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID, uuid4

from admin_console.schemas.permission import ToggleEvent
from admin_console.schemas.role import EditorMode, EditorSnapshot, SubmissionResult
from admin_console.services.content_api import ContentApiClient
from admin_console.services.permission_matrix import AggregateState, PermissionMatrix


class RoleEditorError(Exception):
    """Base class for role editor errors."""


class EditorNotReady(RoleEditorError):
    """Raised when the matrix is used before it finished loading."""


class EditorCancelled(RoleEditorError):
    """Raised when a load is abandoned because its form was torn down."""


class PageNotInMatrix(RoleEditorError):
    """Raised when a toggle targets a page that has no row."""


class CancellationToken:
    """Signals that the owning form went away and pending results must be dropped."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise EditorCancelled("Role editor was closed before loading finished")


class RoleEditor:
    """Owns the permission matrix for one role create or update form."""

    def __init__(
        self,
        client: ContentApiClient,
        *,
        role_id: Optional[str] = None,
        auth_token: Optional[str] = None,
        session_id: Optional[UUID] = None,
    ) -> None:
        self._client = client
        self._auth_token = auth_token
        self.role_id = role_id
        self.session_id = session_id or uuid4()
        self.cancellation = CancellationToken()
        self.name = ""
        self.description = ""
        self._matrix: Optional[PermissionMatrix] = None
        self._logger = logging.getLogger("admin_console.services.role_editor")

    @property
    def mode(self) -> EditorMode:
        return "create" if self.role_id is None else "update"

    @property
    def ready(self) -> bool:
        return self._matrix is not None

    @property
    def matrix(self) -> PermissionMatrix:
        if self._matrix is None:
            raise EditorNotReady("Permission matrix has not been loaded")
        return self._matrix

    async def load(self, cancellation: Optional[CancellationToken] = None) -> PermissionMatrix:
        """Fetch the catalog (and, when updating, the role) and build the matrix.

        Any fetch error propagates and leaves the editor without a matrix.
        """

        token = cancellation or self.cancellation
        catalog = await self._client.get_page_catalog(token=self._auth_token)
        token.raise_if_cancelled()

        existing = None
        name = description = ""
        if self.role_id is not None:
            role = await self._client.get_role(self.role_id, token=self._auth_token)
            token.raise_if_cancelled()
            existing = role.permissions
            name, description = role.name, role.description

        matrix = PermissionMatrix.from_catalog(catalog, existing)
        self._matrix = matrix
        self.name, self.description = name, description

        self._logger.info(
            "role_editor_loaded",
            extra={
                "session_id": str(self.session_id),
                "mode": self.mode,
                "role_id": self.role_id,
                "rows": len(matrix),
                "all_selected": sum(matrix.aggregate.values()),
            },
        )
        return matrix

    def toggle(self, page_name: str, event: ToggleEvent) -> AggregateState:
        matrix = self.matrix
        if page_name not in matrix:
            raise PageNotInMatrix(f"Page '{page_name}' is not part of the permission matrix")
        return matrix.toggle(page_name, event)

    def snapshot(self) -> EditorSnapshot:
        return EditorSnapshot(
            session_id=self.session_id,
            mode=self.mode,
            role_id=self.role_id,
            name=self.name,
            description=self.description,
            rows=self.matrix.view_rows(),
        )

    async def submit(
        self,
        name: str,
        description: str,
        *,
        current_role_id: Optional[str] = None,
    ) -> SubmissionResult:
        """Post the edited role to the content API.

        ``current_role_id`` is the operator's own role; updating it means
        their cached permissions are stale and they must sign in again.
        """

        payload = self.matrix.to_payload(name, description)
        if self.role_id is None:
            await self._client.create_role(payload, token=self._auth_token)
        else:
            await self._client.update_role(self.role_id, payload, token=self._auth_token)

        requires_relogin = self.role_id is not None and self.role_id == current_role_id
        self.name, self.description = payload.name, payload.description
        self._logger.info(
            "role_editor_submitted",
            extra={
                "session_id": str(self.session_id),
                "mode": self.mode,
                "role_id": self.role_id,
                "requires_relogin": requires_relogin,
            },
        )
        return SubmissionResult(
            success=True,
            mode=self.mode,
            role_id=self.role_id,
            requires_relogin=requires_relogin,
        )

    def close(self) -> None:
        self.cancellation.cancel()
