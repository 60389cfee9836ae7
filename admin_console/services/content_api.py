"""HTTP client for the external content API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from admin_console.core.config import AppSettings, get_settings
from admin_console.schemas.permission import ActionBundle, Page, PagePermission
from admin_console.schemas.role import RoleDetails, RoleListResponse, RoleSubmission, StoredRole

logger = logging.getLogger("admin_console.services.content_api")


class ContentApiError(Exception):
    """Base exception for content API operations."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(ContentApiError):
    """Raised when the content API cannot be reached or answers with an error."""


class CatalogUnavailable(ContentApiError):
    """Raised when the page catalog cannot be fetched or parsed."""


class RoleNotFound(ContentApiError):
    """Raised when the requested role does not exist."""


class SubmissionRejected(ContentApiError):
    """Raised when the content API refuses a role create/update."""


class ContentApiClient:
    """
    Client for the content API that owns pages and roles.

    Every response is wrapped in an envelope of the form
    ``{"success", "status", "data", "message", "err"}``; a body whose
    ``status`` is not 200 is treated as a failure even on HTTP 200.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token: Optional[str] = None,
        organization_id: Optional[str] = None,
        timeout: float = 30.0,
        catalog_page_size: int = 100,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._token = token
        self._organization_id = organization_id
        self._catalog_page_size = catalog_page_size
        self._client = httpx.AsyncClient(
            base_url=base_url or "",
            timeout=timeout,
            transport=transport,
        )

        if not self._base_url:
            logger.warning("content_api_url_not_configured")

    @classmethod
    def from_settings(
        cls,
        settings: Optional[AppSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ContentApiClient":
        settings = settings or get_settings()
        return cls(
            settings.content_api_url,
            token=settings.content_api_token,
            organization_id=settings.organization_id,
            timeout=settings.request_timeout,
            catalog_page_size=settings.catalog_page_size,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_page_catalog(self, *, token: Optional[str] = None) -> List[Page]:
        """Return the ordered list of pages that can receive permissions."""

        try:
            data = await self._request(
                "GET",
                "/page",
                params={"page": 1, "limit": self._catalog_page_size},
                token=token,
            )
        except TransportError as exc:
            raise CatalogUnavailable(f"Page catalog unavailable: {exc}", status_code=exc.status_code) from exc

        if not isinstance(data, list):
            raise CatalogUnavailable("Page catalog response is not a list")
        try:
            pages = [Page.model_validate(item) for item in data]
        except ValidationError as exc:
            logger.error("content_api_catalog_invalid", extra={"error": str(exc)})
            raise CatalogUnavailable("Page catalog response could not be parsed") from exc

        logger.info("content_api_catalog_loaded", extra={"count": len(pages)})
        return pages

    async def get_role(self, role_id: str, *, token: Optional[str] = None) -> RoleDetails:
        try:
            data = await self._request("GET", f"/role/{role_id}", token=token)
        except TransportError as exc:
            if exc.status_code == 404:
                raise RoleNotFound(f"Role {role_id} not found", status_code=404) from exc
            raise

        if not isinstance(data, dict):
            raise RoleNotFound(f"Role {role_id} not found", status_code=404)

        fields = {key: value for key, value in data.items() if key != "permissions"}
        try:
            permissions = _parse_role_permissions(data.get("permissions") or [], role_id=role_id)
            role = StoredRole.model_validate(fields)
        except ValidationError as exc:
            logger.error("content_api_role_invalid", extra={"role_id": role_id, "error": str(exc)})
            raise TransportError(f"Role {role_id} response could not be parsed") from exc
        return RoleDetails(**role.model_dump(), permissions=permissions)

    async def get_role_permissions(self, role_id: str, *, token: Optional[str] = None) -> List[PagePermission]:
        role = await self.get_role(role_id, token=token)
        return role.permissions

    async def list_roles(self, *, page: int = 1, limit: int = 20, token: Optional[str] = None) -> RoleListResponse:
        envelope = await self._request_envelope(
            "GET",
            "/role",
            params={"page": page, "limit": limit},
            token=token,
        )
        items = envelope.get("data") or []
        try:
            roles = [StoredRole.model_validate(item) for item in items if isinstance(item, dict)]
        except ValidationError as exc:
            logger.error("content_api_role_list_invalid", extra={"page": page, "error": str(exc)})
            raise TransportError("Role list response could not be parsed") from exc
        pages = envelope.get("pages") or {}
        return RoleListResponse(
            roles=roles,
            page=pages.get("current_page", page),
            limit=limit,
            total=pages.get("total_data"),
        )

    async def create_role(self, payload: RoleSubmission, *, token: Optional[str] = None) -> Any:
        return await self._submit("/role", payload.model_dump(by_alias=True), token=token)

    async def update_role(self, role_id: str, payload: RoleSubmission, *, token: Optional[str] = None) -> Any:
        body = {"role_id": role_id, **payload.model_dump(by_alias=True)}
        return await self._submit("/role/edit", body, token=token)

    async def delete_roles(self, role_ids: Sequence[str], *, token: Optional[str] = None) -> Any:
        data = await self._request("DELETE", "/role", json={"role_id": list(role_ids)}, token=token)
        logger.info("content_api_roles_deleted", extra={"role_ids": list(role_ids)})
        return data

    async def _submit(self, path: str, body: Dict[str, Any], *, token: Optional[str]) -> Any:
        try:
            return await self._request(
                "POST",
                path,
                json=body,
                headers={"accept-language": "en"},
                token=token,
            )
        except TransportError as exc:
            # The API answers validation problems inside the envelope, not via HTTP status.
            if exc.status_code is not None and 400 <= exc.status_code < 500:
                raise SubmissionRejected(str(exc), status_code=exc.status_code) from exc
            raise

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
    ) -> Any:
        envelope = await self._request_envelope(
            method, path, params=params, json=json, headers=headers, token=token
        )
        return envelope.get("data")

    async def _request_envelope(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not self._base_url:
            raise TransportError("Content API URL is not configured")

        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(headers, token),
            )
            response.raise_for_status()
            envelope = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "content_api_http_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": exc.response.status_code,
                    "detail": exc.response.text,
                },
            )
            raise TransportError(
                f"{method} {path} failed: {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.RequestError as exc:
            logger.error(
                "content_api_request_error",
                extra={"method": method, "path": path, "error": str(exc)},
            )
            raise TransportError(f"Failed to connect to content API: {exc}") from exc
        except ValueError as exc:
            logger.error("content_api_invalid_json", extra={"method": method, "path": path})
            raise TransportError(f"{method} {path} returned invalid JSON") from exc

        if not isinstance(envelope, dict):
            raise TransportError(f"{method} {path} returned an unexpected body")

        status = envelope.get("status")
        if status != 200:
            message = envelope.get("err") or envelope.get("message") or "Something went wrong"
            logger.warning(
                "content_api_envelope_error",
                extra={"method": method, "path": path, "status": status, "detail": message},
            )
            raise TransportError(str(message), status_code=status if isinstance(status, int) else None)

        return envelope

    def _headers(self, extra: Optional[Dict[str, str]], token: Optional[str]) -> Dict[str, str]:
        headers: Dict[str, str] = dict(extra or {})
        auth = token or self._token
        if auth:
            headers["Authorization"] = auth
        if self._organization_id:
            headers["organizationid"] = self._organization_id
        return headers


def _parse_role_permissions(items: List[Any], *, role_id: str) -> List[PagePermission]:
    """Map stored ``{page_id: {name}, actions}`` entries onto page-name keyed permissions."""

    permissions: List[PagePermission] = []
    skipped = 0
    for item in items:
        if not isinstance(item, dict):
            skipped += 1
            continue
        page = item.get("page_id")
        page_name = page.get("name") if isinstance(page, dict) else None
        if not page_name:
            skipped += 1
            continue
        permissions.append(
            PagePermission(
                page_name=page_name,
                actions=ActionBundle.model_validate(item.get("actions") or {}),
            )
        )

    if skipped:
        logger.warning(
            "content_api_role_permissions_skipped",
            extra={"role_id": role_id, "count": skipped},
        )
    return permissions
