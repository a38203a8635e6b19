"""Tests for HttpRepository against a mocked transport."""

import asyncio
import json

import httpx
import pytest

from flowboard.errors import PersistConflictError, PersistTransportError
from flowboard.models import ColumnQuery, PositionAssignment, Task
from flowboard.repositories import HttpRepository


class Recorder:
    """Mock API: replies with a fixed response and records requests."""

    def __init__(self, status: int = 200, body=None, error: Exception | None = None):
        self.status = status
        self.body = body
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.body is None:
            return httpx.Response(self.status)
        return httpx.Response(self.status, json=self.body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def call(api: Recorder, method: str, *args, **kwargs):
    """Run one repository call against the mock API."""

    async def scenario():
        async with HttpRepository(
            "https://board.test/api/", token="secret", transport=httpx.MockTransport(api)
        ) as repo:
            return await getattr(repo, method)(*args, **kwargs)

    return asyncio.run(scenario())


class TestRequests:
    """Tests for request shapes."""

    def test_persist_move(self):
        api = Recorder(204)

        call(api, "persist_move", "42", "done", 1.5)

        assert api.last.method == "PATCH"
        assert api.last.url.path == "/api/tasks/42/move"
        assert json.loads(api.last.content) == {"columnId": "done", "position": 1.5}
        assert api.last.headers["Authorization"] == "Bearer secret"

    def test_persist_renumber(self):
        api = Recorder(200, {"ok": True})

        call(
            api,
            "persist_renumber",
            "todo",
            [PositionAssignment("1", 0), PositionAssignment("2", 1000)],
        )

        assert api.last.method == "PUT"
        assert api.last.url.path == "/api/columns/todo/positions"
        assert json.loads(api.last.content) == [
            {"taskId": "1", "position": 0},
            {"taskId": "2", "position": 1000},
        ]

    def test_fetch_column_tasks_sends_query(self):
        api = Recorder(200, [])

        call(api, "fetch_column_tasks", "todo", ColumnQuery(search="bug", page=2, page_size=5))

        params = api.last.url.params
        assert params["search"] == "bug"
        assert params["page"] == "2"
        assert params["limit"] == "5"
        assert params["sort"] == "position"

    def test_create_task_posts_to_column(self):
        api = Recorder(201, {"id": 7, "title": "New", "position": 3})

        created = call(api, "create_task", Task(id="", column_id="todo", position=3, title="New"))

        assert api.last.url.path == "/api/columns/todo/tasks"
        assert created.id == "7"
        assert created.column_id == "todo"
        assert created.position == 3


class TestResponses:
    """Tests for response parsing."""

    def test_tasks_from_list_or_envelope(self):
        item = {
            "id": 1,
            "columnId": "todo",
            "order": 4,
            "title": "A",
            "createdAt": "2024-01-01T00:00:00Z",
        }

        from_list = call(Recorder(200, [item]), "fetch_column_tasks", "todo")
        from_envelope = call(Recorder(200, {"tasks": [item]}), "fetch_column_tasks", "todo")

        assert from_list == from_envelope
        assert from_list[0].position == 4
        assert from_list[0].created.year == 2024

    def test_list_columns(self):
        api = Recorder(
            200,
            [
                {"id": "todo", "title": "To Do", "boardId": "b1"},
                {"id": "doing", "name": "Doing", "boardId": "b1", "wipLimit": 2},
            ],
        )

        columns = call(api, "list_columns")

        assert [(c.id, c.name, c.wip_limit) for c in columns] == [
            ("todo", "To Do", None),
            ("doing", "Doing", 2),
        ]
        assert columns[0].board_id == "b1"

    def test_get_wip_limit(self):
        assert call(Recorder(200, {"id": "doing", "wipLimit": 3}), "get_wip_limit", "doing") == 3
        assert call(Recorder(200, {"id": "todo"}), "get_wip_limit", "todo") is None


class TestErrorMapping:
    """Tests for mapping HTTP failures onto persistence errors."""

    @pytest.mark.parametrize("status", [404, 409, 412, 422])
    def test_refusals_are_conflicts(self, status: int):
        api = Recorder(status, {"error": "stale position"})

        with pytest.raises(PersistConflictError, match="stale position"):
            call(api, "persist_move", "1", "done", 0)

    @pytest.mark.parametrize("status", [400, 500, 503])
    def test_other_errors_are_transport_failures(self, status: int):
        with pytest.raises(PersistTransportError):
            call(Recorder(status), "persist_move", "1", "done", 0)

    def test_timeout(self):
        api = Recorder(error=httpx.ReadTimeout("slow"))

        with pytest.raises(PersistTransportError, match="timed out"):
            call(api, "persist_move", "1", "done", 0)

    def test_connection_error(self):
        api = Recorder(error=httpx.ConnectError("refused"))

        with pytest.raises(PersistTransportError):
            call(api, "fetch_column_tasks", "todo")

    def test_delete_of_missing_task_is_ignored(self):
        api = Recorder(404)

        call(api, "delete_task", "1")

        assert api.last.method == "DELETE"
