"""Production API client.

Async HTTP client for the production-management application's REST API.
Each tool calls exactly one method here. Every method returns a
`CrudResponse` envelope (`data` or `error`); business failures never raise.
Transport failures and 5xx responses raise ProductionUnavailableError.
"""

from enum import Enum
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from slate_obs.logging import get_logger
from slate_tools.exceptions import ProductionUnavailableError

logger = get_logger(__name__)


def _segment(value: str) -> str:
    """Percent-encode one path segment. Dot segments would climb out of the project."""
    if value in ("", ".", ".."):
        raise ValueError(f"Invalid id: {value!r}")
    return quote(value, safe="")


def _path(project_id: str, *segments: str) -> str:
    return "/projects/" + "/".join(_segment(s) for s in (project_id, *segments))


class Resource(str, Enum):
    """Entity collections exposed by the production API."""

    SCENES = "scenes"
    CAST_MEMBERS = "cast-members"
    LOCATIONS = "locations"
    SHOOTING_DAYS = "shooting-days"
    ELEMENTS = "elements"
    CREW_MEMBERS = "crew-members"


class CrudResponse(BaseModel):
    """`{data}` or `{error}` envelope returned by every CRUD operation."""

    data: Any = None
    error: str | None = None
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class ProductionClient:
    """Production API client.

    Provides:
    - Project-scoped list/create/update/delete per entity type
    - Scene scheduling and cast linking
    - Project membership checks
    - Error mapping: 4xx -> CrudResponse(error), 5xx/network -> exception
    """

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize production client.

        Args:
            base_url: API root, e.g. https://app.example.com/api/v1
            api_token: Service token sent as a bearer credential
            timeout_seconds: Request timeout
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        headers = {"Content-Type": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> CrudResponse:
        try:
            response = await self.client.request(method, path, json=payload)
        except httpx.TimeoutException as e:
            raise ProductionUnavailableError(
                f"Production API timed out after {self.timeout_seconds}s: {method} {path}"
            ) from e
        except httpx.HTTPError as e:
            raise ProductionUnavailableError(f"Production API unreachable: {e}") from e

        if response.status_code >= 500:
            logger.error(
                "production_api_server_error",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise ProductionUnavailableError(
                f"Production API error ({response.status_code}) on {method} {path}"
            )

        body = self._json_body(response)

        if response.status_code >= 400:
            message = body.get("error") if isinstance(body, dict) else None
            if not message:
                message = response.text or response.reason_phrase
            logger.info(
                "production_api_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
            )
            return CrudResponse(error=str(message), status_code=response.status_code)

        if isinstance(body, dict) and body.get("error"):
            return CrudResponse(error=str(body["error"]))
        if isinstance(body, dict) and "data" in body:
            return CrudResponse(data=body["data"])
        return CrudResponse(data=body)

    @staticmethod
    def _json_body(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    # ------------------------------------------------------------------------
    # ENTITY CRUD
    # ------------------------------------------------------------------------

    async def get_all(self, resource: Resource, project_id: str) -> CrudResponse:
        """Get all entities of one type for a project."""
        return await self._request("GET", _path(project_id, resource.value))

    async def get_one(self, resource: Resource, project_id: str, entity_id: str) -> CrudResponse:
        return await self._request("GET", _path(project_id, resource.value, entity_id))

    async def create(
        self, resource: Resource, project_id: str, fields: dict[str, Any]
    ) -> CrudResponse:
        return await self._request("POST", _path(project_id, resource.value), fields)

    async def update(
        self,
        resource: Resource,
        project_id: str,
        entity_id: str,
        fields: dict[str, Any],
    ) -> CrudResponse:
        return await self._request(
            "PATCH", _path(project_id, resource.value, entity_id), fields
        )

    async def delete(self, resource: Resource, project_id: str, entity_id: str) -> CrudResponse:
        return await self._request(
            "DELETE", _path(project_id, resource.value, entity_id)
        )

    # ------------------------------------------------------------------------
    # RELATIONSHIPS
    # ------------------------------------------------------------------------

    async def assign_scene_to_shooting_day(
        self,
        project_id: str,
        scene_id: str,
        shooting_day_id: str,
        position: int = 0,
    ) -> CrudResponse:
        return await self._request(
            "POST",
            _path(project_id, "shooting-days", shooting_day_id, "scenes"),
            {"sceneId": scene_id, "position": position},
        )

    async def add_cast_to_scene(
        self, project_id: str, scene_id: str, cast_member_id: str
    ) -> CrudResponse:
        return await self._request(
            "POST",
            _path(project_id, "scenes", scene_id, "cast"),
            {"castMemberId": cast_member_id},
        )

    # ------------------------------------------------------------------------
    # ACCESS
    # ------------------------------------------------------------------------

    async def check_project_access(self, project_id: str, user_id: str) -> bool:
        """True if the user is a member of the project."""
        try:
            path = _path(project_id, "members", user_id)
        except ValueError:
            return False
        response = await self._request("GET", path)
        return response.ok and bool(response.data)

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
