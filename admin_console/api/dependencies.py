"""Dependency injection helpers for FastAPI routes."""

from __future__ import annotations

from typing import Optional

from fastapi import Header, Request

from admin_console.services.content_api import ContentApiClient
from admin_console.services.sessions import EditorSessionRegistry


def get_content_api(request: Request) -> ContentApiClient:
    return request.app.state.content_api


def get_session_registry(request: Request) -> EditorSessionRegistry:
    return request.app.state.editor_sessions


def get_forwarded_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Operator token to forward to the content API, if the caller sent one."""

    return authorization or None
