"""REST API repository for task storage."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from ..errors import PersistConflictError, PersistTransportError
from ..models import Column, ColumnQuery, PositionAssignment, Task
from ..utils import from_iso

logger = logging.getLogger(__name__)

# Responses meaning the store understood the request and refused it
CONFLICT_STATUSES = frozenset({404, 409, 412, 422})


class HttpRepository:
    """Board store reached over a JSON REST API.

    Endpoints:
    - ``GET /columns`` and ``GET /columns/{id}``
    - ``GET /columns/{id}/tasks?search=&sort=&page=&limit=``
    - ``POST /columns/{id}/tasks``
    - ``PATCH /tasks/{id}/move`` with ``{"columnId", "position"}``
    - ``PUT /columns/{id}/positions`` with ``[{"taskId", "position"}]``
    - ``DELETE /tasks/{id}``
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. ``https://kanban.example.com/api``
            token: Optional bearer token
            timeout: Request timeout in seconds
            transport: Custom transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> HttpRepository:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # --- Gateway Operations ---

    async def persist_move(self, task_id: str, dest_column_id: str, new_position: float) -> None:
        await self._request(
            "PATCH",
            f"/tasks/{task_id}/move",
            json={"columnId": dest_column_id, "position": new_position},
        )

    async def persist_renumber(
        self, column_id: str, assignments: Sequence[PositionAssignment]
    ) -> None:
        await self._request(
            "PUT",
            f"/columns/{column_id}/positions",
            json=[{"taskId": a.task_id, "position": a.position} for a in assignments],
        )

    async def fetch_column_tasks(
        self, column_id: str, query: ColumnQuery | None = None
    ) -> list[Task]:
        query = query or ColumnQuery()
        params: dict[str, Any] = {"sort": query.sort, "page": query.page}
        if query.search:
            params["search"] = query.search
        if query.page_size is not None:
            params["limit"] = query.page_size

        data = await self._request("GET", f"/columns/{column_id}/tasks", params=params)
        items = data.get("tasks", []) if isinstance(data, dict) else data
        return [self._parse_task(item, column_id) for item in items]

    async def get_wip_limit(self, column_id: str) -> int | None:
        data = await self._request("GET", f"/columns/{column_id}")
        return data.get("wipLimit")

    async def list_columns(self) -> list[Column]:
        data = await self._request("GET", "/columns")
        return [self._parse_column(item) for item in data]

    async def create_task(self, task: Task) -> Task:
        payload = {
            "title": task.title,
            "description": task.description,
            "priority": task.priority,
            "tags": task.tags,
            "position": task.position,
        }
        data = await self._request("POST", f"/columns/{task.column_id}/tasks", json=payload)
        created = self._parse_task(data, task.column_id)
        logger.info("Task created: %s (%s at %r)", created.id, created.column_id, created.position)
        return created

    async def delete_task(self, task_id: str) -> None:
        try:
            await self._request("DELETE", f"/tasks/{task_id}")
        except PersistConflictError:
            logger.debug("delete_task: already gone: %s", task_id)

    # --- Private Methods ---

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and decode its JSON body.

        Raises:
            PersistConflictError: The API refused the request
            PersistTransportError: Network failure, timeout or server error
        """
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise PersistTransportError(f"{method} {path} timed out") from e
        except httpx.TransportError as e:
            raise PersistTransportError(f"{method} {path} failed: {e}") from e

        if response.status_code in CONFLICT_STATUSES:
            raise PersistConflictError(
                f"{method} {path} rejected ({response.status_code}): {self._error_message(response)}"
            )
        if response.status_code >= 400:
            raise PersistTransportError(
                f"{method} {path} failed ({response.status_code}): {self._error_message(response)}"
            )

        logger.debug("%s %s -> %d", method, path, response.status_code)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get("error") or body.get("message") or body)
        return str(body)

    @staticmethod
    def _parse_task(data: dict[str, Any], column_id: str) -> Task:
        return Task(
            id=str(data["id"]),
            column_id=str(data.get("columnId", column_id)),
            position=float(data.get("position", data.get("order", 0))),
            title=data.get("title"),
            description=data.get("description") or "",
            priority=data.get("priority") or "medium",
            tags=data.get("tags") or [],
            created=from_iso(data.get("createdAt")),
            updated=from_iso(data.get("updatedAt")),
        )

    @staticmethod
    def _parse_column(data: dict[str, Any]) -> Column:
        return Column(
            id=str(data["id"]),
            board_id=str(data.get("boardId", "default")),
            name=data.get("name") or data.get("title") or "",
            wip_limit=data.get("wipLimit"),
        )

