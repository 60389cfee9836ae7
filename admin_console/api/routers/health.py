"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from admin_console.api.dependencies import get_session_registry
from admin_console.services.sessions import EditorSessionRegistry

router = APIRouter()


@router.get("/healthz", summary="Liveness check")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", summary="Readiness check")
def readiness_check(
    request: Request,
    registry: EditorSessionRegistry = Depends(get_session_registry),
) -> dict[str, object]:
    configured = request.app.state.settings.content_api_url is not None
    return {
        "status": "ok" if configured else "degraded",
        "content_api_configured": configured,
        "open_sessions": len(registry),
    }
