"""
Bug Tracker API Client
======================
Asynchronous client for the bug-tracking REST backend.

Endpoints:
    POST /auth/login            — exchange credentials for {token, role, username}
    GET  /bugs                  — bug reports visible to the caller (server filters by role)
    POST /bugs                  — submit a new bug report
    PUT  /bugs/{id}             — change the status of a bug
    PUT  /bugs/{id}/assign      — assign a bug to a developer
    PUT  /bugs/{id}/approve     — approve a resolved bug
    GET  /users/developers      — assignment targets

Failure Handling:
    - Transport errors and non-2xx answers raise NetworkFailure
    - Bodies that do not match the models raise NetworkFailure as well
    - No retry and no backoff: the user re-triggers the action

The session token is attached as a bearer credential on every request.
"""
import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from bugtracker.core.config import API_BASE_URL, REQUEST_TIMEOUT
from bugtracker.models.bug_report import BugId, BugReport, BugStatus, NewBugReport
from bugtracker.models.developer import Developer
from bugtracker.models.session import UserSession

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class NetworkFailure(Exception):
    """The backend was unreachable, answered non-2xx, or sent a malformed body."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BugTrackerClient:
    """
    Thin wrapper over httpx.AsyncClient for the bug-tracking backend.

    Usable as an async context manager (one connection pool for the whole
    block) or directly, in which case every call opens its own client.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: str = "",
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Accept": "application/json",
            "User-Agent": "bugtracker-client",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def __aenter__(self) -> "BugTrackerClient":
        self._client = self._new_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -----------------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------------
    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        """Send one request and return the decoded JSON body (None if empty)."""
        client = self._client
        owns_client = client is None
        if owns_client:
            client = self._new_client()

        try:
            response = await client.request(method, path, json=json)
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except httpx.HTTPStatusError as http_err:
            status_code = http_err.response.status_code
            logger.warning("%s %s answered HTTP %d", method, path, status_code)
            raise NetworkFailure(
                f"{method} {path} failed with HTTP {status_code}",
                status_code=status_code,
            ) from http_err
        except httpx.RequestError as req_err:
            logger.error("%s %s could not reach the backend: %s", method, path, req_err)
            raise NetworkFailure(f"{method} {path} failed: {req_err}") from req_err
        except ValueError as json_err:
            logger.error("%s %s returned a body that is not JSON", method, path)
            raise NetworkFailure(f"{method} {path} returned invalid JSON") from json_err
        finally:
            if owns_client:
                await client.aclose()

    @staticmethod
    def _parse(model: Type[ModelT], data: Any, path: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Malformed %s from %s: %s", model.__name__, path, exc)
            raise NetworkFailure(f"Malformed {model.__name__} from {path}") from exc

    def _parse_list(self, model: Type[ModelT], data: Any, path: str) -> list[ModelT]:
        if not isinstance(data, list):
            raise NetworkFailure(f"Expected a list from {path}")
        return [self._parse(model, item, path) for item in data]

    def _parse_optional(self, model: Type[ModelT], data: Any, path: str) -> Optional[ModelT]:
        if data is None:
            return None
        return self._parse(model, data, path)

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------
    async def login(self, username: str, password: str) -> UserSession:
        data = await self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        if isinstance(data, dict):
            data.setdefault("username", username)
        return self._parse(UserSession, data, "/auth/login")

    async def list_bugs(self) -> list[BugReport]:
        data = await self._request("GET", "/bugs")
        return self._parse_list(BugReport, data, "/bugs")

    async def create_bug(self, payload: NewBugReport) -> Optional[BugReport]:
        data = await self._request("POST", "/bugs", json=payload.model_dump(mode="json"))
        return self._parse_optional(BugReport, data, "/bugs")

    async def update_status(self, bug_id: BugId, status: BugStatus) -> Optional[BugReport]:
        path = f"/bugs/{bug_id}"
        data = await self._request("PUT", path, json={"status": BugStatus(status).value})
        return self._parse_optional(BugReport, data, path)

    async def assign_bug(self, bug_id: BugId, developer_id: BugId) -> Optional[BugReport]:
        path = f"/bugs/{bug_id}/assign"
        data = await self._request("PUT", path, json={"developerId": developer_id})
        return self._parse_optional(BugReport, data, path)

    async def approve_bug(self, bug_id: BugId) -> Optional[BugReport]:
        path = f"/bugs/{bug_id}/approve"
        data = await self._request("PUT", path)
        return self._parse_optional(BugReport, data, path)

    async def list_developers(self) -> list[Developer]:
        data = await self._request("GET", "/users/developers")
        return self._parse_list(Developer, data, "/users/developers")
