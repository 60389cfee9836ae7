"""Exception handlers for the FastAPI app."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from admin_console.services.content_api import (
    CatalogUnavailable,
    ContentApiError,
    RoleNotFound,
    SubmissionRejected,
)
from admin_console.services.role_editor import (
    EditorCancelled,
    EditorNotReady,
    PageNotInMatrix,
    RoleEditorError,
)
from admin_console.services.sessions import SessionNotFound


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RoleNotFound)
    async def role_not_found_handler(request: Request, exc: RoleNotFound) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(CatalogUnavailable)
    async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailable) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(SubmissionRejected)
    async def submission_rejected_handler(request: Request, exc: SubmissionRejected) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ContentApiError)
    async def content_api_handler(request: Request, exc: ContentApiError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(SessionNotFound)
    async def session_not_found_handler(request: Request, exc: SessionNotFound) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PageNotInMatrix)
    async def page_not_in_matrix_handler(request: Request, exc: PageNotInMatrix) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(EditorNotReady)
    async def editor_not_ready_handler(request: Request, exc: EditorNotReady) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(EditorCancelled)
    async def editor_cancelled_handler(request: Request, exc: EditorCancelled) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(RoleEditorError)
    async def role_editor_handler(request: Request, exc: RoleEditorError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:  # noqa: WPS430
        return JSONResponse(
            status_code=422,
            content={"detail": jsonable_encoder(exc.errors(include_url=False, include_context=False))},
        )
