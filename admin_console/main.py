"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin_console.api.error_handlers import register_exception_handlers
from admin_console.api.routers import get_api_router
from admin_console.core.config import AppSettings, get_settings
from admin_console.core.logging import configure_logging
from admin_console.services.content_api import ContentApiClient
from admin_console.services.sessions import EditorSessionRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: D401
    """Application lifespan context for startup/shutdown hooks."""

    yield

    app.state.editor_sessions.clear()
    await app.state.content_api.aclose()


def create_app(
    settings: AppSettings | None = None,
    *,
    content_api: Optional[ContentApiClient] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Admin Console Role Editor",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.content_api = content_api or ContentApiClient.from_settings(settings, transport=transport)
    app.state.editor_sessions = EditorSessionRegistry(max_sessions=settings.max_sessions)

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(get_api_router())
    return app


app = create_app()
