"""Role listing and removal, proxied to the content API."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from admin_console.api.dependencies import get_content_api, get_forwarded_token
from admin_console.schemas.role import RoleDeleteRequest, RoleListResponse
from admin_console.services.content_api import ContentApiClient

router = APIRouter()


@router.get("", response_model=RoleListResponse)
async def list_roles(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    client: ContentApiClient = Depends(get_content_api),
    token: Optional[str] = Depends(get_forwarded_token),
) -> RoleListResponse:
    return await client.list_roles(page=page, limit=limit, token=token)


@router.delete("")
async def delete_roles(
    payload: RoleDeleteRequest,
    client: ContentApiClient = Depends(get_content_api),
    token: Optional[str] = Depends(get_forwarded_token),
) -> dict[str, object]:
    await client.delete_roles(payload.role_ids, token=token)
    return {"status": "deleted", "role_ids": payload.role_ids}
