"""HTTP client for the taskboard API.

The session is passed into every call instead of living in module state, so
one process can talk to the API as several users.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger("taskboard.client")


class NoSessionError(Exception):
    """Raised when a request is attempted without an authenticated session."""


class ApiError(Exception):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


@dataclass(frozen=True)
class Session:
    access_token: str
    user_id: Optional[int] = None

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"


class ApiClient:
    """
    Thin wrapper that attaches the bearer token and unwraps JSON / error bodies.

    `http` is anything with a requests-style `request(method, url, headers=,
    json=, params=)`; a `requests.Session` is used when none is given.
    """

    def __init__(self, base_url: str = "", http: Any = None, timeout: Optional[float] = 10):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    @staticmethod
    def login(http: Any, email: str, password: str, base_url: str = "") -> Session:
        """Exchange credentials for a Session."""
        response = ApiClient._send(
            http,
            "POST",
            f"{base_url.rstrip('/')}/auth/login",
            json={"email": email, "password": password},
        )
        body = ApiClient._decode(response)
        return Session(access_token=body["access_token"])

    def request(
        self,
        session: Optional[Session],
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if session is None or not session.access_token:
            raise NoSessionError("No active session")

        kwargs: Dict[str, Any] = {
            "headers": {
                "Content-Type": "application/json",
                "Authorization": session.authorization,
            },
        }
        if json is not None:
            kwargs["json"] = json
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout

        response = self._send(self.http, method, f"{self.base_url}{path}", **kwargs)
        return self._decode(response)

    @staticmethod
    def _send(http: Any, method: str, url: str, **kwargs) -> Any:
        try:
            return http.request(method, url, **kwargs)
        except requests.exceptions.RequestException as exc:
            logger.error("api_request_failed", extra={"method": method, "url": url, "error": str(exc)})
            # no response: status 0
            raise ApiError(0, f"Request failed: {exc}") from exc

    @staticmethod
    def _decode(response) -> Any:
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {"error": "Unknown error"}
            message = body.get("error") if isinstance(body, dict) else None
            raise ApiError(response.status_code, message or f"HTTP {response.status_code}")
        return response.json()

    # -------------------------
    # Tasks
    # -------------------------

    def list_tasks(self, session: Session, **filters) -> List[Dict[str, Any]]:
        return self.request(session, "GET", "/api/tasks", params=filters)

    def create_task(self, session: Session, **fields) -> Dict[str, Any]:
        return self.request(session, "POST", "/api/tasks", json=fields)

    def update_task(self, session: Session, task_id: int, **fields) -> Dict[str, Any]:
        return self.request(session, "PUT", f"/api/tasks/{task_id}", json=fields)

    def delete_task(self, session: Session, task_id: int) -> Dict[str, Any]:
        return self.request(session, "DELETE", f"/api/tasks/{task_id}")

    def reorder_tasks(self, session: Session, task_ids: List[int]) -> Dict[str, Any]:
        return self.request(session, "PUT", "/api/tasks/reorder", json={"task_ids": list(task_ids)})

    # -------------------------
    # Projects / dashboard
    # -------------------------

    def list_projects(self, session: Session, include_archived: bool = False) -> List[Dict[str, Any]]:
        params = {"include_archived": "true"} if include_archived else None
        return self.request(session, "GET", "/api/projects", params=params)

    def create_project(self, session: Session, **fields) -> Dict[str, Any]:
        return self.request(session, "POST", "/api/projects", json=fields)

    def dashboard_stats(self, session: Session) -> Dict[str, Any]:
        return self.request(session, "GET", "/api/dashboard/stats")
