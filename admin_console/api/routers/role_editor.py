"""Role editor endpoints backing the permission matrix UI."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Response, status

from admin_console.api.dependencies import get_content_api, get_forwarded_token, get_session_registry
from admin_console.schemas.permission import ToggleEvent, ToggleRequest
from admin_console.schemas.role import EditorSessionCreate, EditorSnapshot, RoleSubmitRequest, SubmissionResult
from admin_console.services.content_api import ContentApiClient
from admin_console.services.role_editor import RoleEditor
from admin_console.services.sessions import EditorSessionRegistry

router = APIRouter()


@router.post(
    "/sessions",
    response_model=EditorSnapshot,
    status_code=status.HTTP_201_CREATED,
)
async def open_session(
    payload: EditorSessionCreate,
    client: ContentApiClient = Depends(get_content_api),
    registry: EditorSessionRegistry = Depends(get_session_registry),
    token: Optional[str] = Depends(get_forwarded_token),
) -> EditorSnapshot:
    editor = registry.add(RoleEditor(client, role_id=payload.role_id, auth_token=token))
    try:
        await editor.load()
    except Exception:
        registry.discard(editor.session_id)
        raise
    return editor.snapshot()


@router.get("/sessions/{session_id}", response_model=EditorSnapshot)
def get_session(
    session_id: UUID,
    registry: EditorSessionRegistry = Depends(get_session_registry),
) -> EditorSnapshot:
    return registry.get(session_id).snapshot()


@router.post("/sessions/{session_id}/toggle", response_model=EditorSnapshot)
def toggle_permission(
    session_id: UUID,
    payload: ToggleRequest,
    registry: EditorSessionRegistry = Depends(get_session_registry),
) -> EditorSnapshot:
    editor = registry.get(session_id)
    editor.toggle(payload.page_name, ToggleEvent(action=payload.action, value=payload.value))
    return editor.snapshot()


@router.post("/sessions/{session_id}/submit", response_model=SubmissionResult)
async def submit_role(
    session_id: UUID,
    payload: RoleSubmitRequest,
    registry: EditorSessionRegistry = Depends(get_session_registry),
    x_role_id: Optional[str] = Header(default=None, alias="X-Role-Id"),
) -> SubmissionResult:
    editor = registry.get(session_id)
    result = await editor.submit(payload.name, payload.description, current_role_id=x_role_id)
    registry.discard(session_id)
    return result


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_session(
    session_id: UUID,
    registry: EditorSessionRegistry = Depends(get_session_registry),
) -> Response:
    registry.discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
