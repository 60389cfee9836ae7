"""Router registrations."""

from fastapi import APIRouter

from admin_console.api.routers import health, role_editor, roles


def get_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health.router, tags=["health"])
    router.include_router(role_editor.router, prefix="/api/v1/role-editor", tags=["role-editor"])
    router.include_router(roles.router, prefix="/api/v1/roles", tags=["roles"])
    return router
