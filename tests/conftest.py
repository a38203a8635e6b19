"""Shared fixtures: an in-memory persistence gateway with scriptable failures."""

import asyncio
import itertools
from collections.abc import Sequence

import pytest

from flowboard.errors import PersistConflictError
from flowboard.models import Column, ColumnQuery, PositionAssignment, Task


class FakeGateway:
    """In-memory authoritative store.

    - ``fail(op, exc, target)`` makes the next call of ``op`` ("move", "renumber",
      "fetch") raise ``exc``; with ``target`` only a call whose first
      argument (task or column id) equals it.
    - ``pause()`` makes persist calls wait until ``release()``.
    """

    def __init__(self, columns: Sequence[Column]) -> None:
        self.columns = {c.id: c.model_copy() for c in columns}
        self.tasks: dict[str, Task] = {}
        self.calls: list[tuple] = []
        self._failures: dict[str, tuple[Exception, str | None]] = {}
        self._gate: asyncio.Event | None = None
        self._ids = itertools.count(1)

    # --- Test controls ---

    def add(self, task_id: str, column_id: str, position: float, title: str | None = None) -> Task:
        task = Task(id=task_id, column_id=column_id, position=position, title=title or task_id)
        self.tasks[task_id] = task
        return task

    def fail(self, op: str, exc: Exception, target: str | None = None) -> None:
        self._failures[op] = (exc, target)

    def pause(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()
        self._gate = None

    def persist_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("move", "renumber")]

    def order(self, column_id: str) -> list[str]:
        return [t.id for t in sorted(self._in(column_id), key=lambda t: t.position)]

    # --- Gateway ---

    async def _enter(self, op: str, *args: object) -> None:
        self.calls.append((op, *args))
        if self._gate is not None:
            await self._gate.wait()
        if op in self._failures:
            exc, target = self._failures[op]
            if target is None or target == args[0]:
                del self._failures[op]
                raise exc

    async def persist_move(self, task_id: str, dest_column_id: str, new_position: float) -> None:
        await self._enter("move", task_id, dest_column_id, new_position)
        if task_id not in self.tasks:
            raise PersistConflictError(f"Task {task_id} no longer exists")
        self.tasks[task_id] = self.tasks[task_id].model_copy(
            update={"column_id": dest_column_id, "position": new_position}
        )

    async def persist_renumber(
        self, column_id: str, assignments: Sequence[PositionAssignment]
    ) -> None:
        await self._enter("renumber", column_id, tuple(assignments))
        for a in assignments:
            self.tasks[a.task_id] = self.tasks[a.task_id].model_copy(
                update={"position": a.position}
            )

    async def fetch_column_tasks(
        self, column_id: str, query: ColumnQuery | None = None
    ) -> list[Task]:
        await self._enter("fetch", column_id)
        return sorted(self._in(column_id), key=lambda t: t.position)

    async def get_wip_limit(self, column_id: str) -> int | None:
        return self.columns[column_id].wip_limit

    async def list_columns(self) -> list[Column]:
        return [c.model_copy() for c in self.columns.values()]

    async def create_task(self, task: Task) -> Task:
        created = task.model_copy(update={"id": f"N{next(self._ids)}"})
        self.tasks[created.id] = created
        return created

    async def delete_task(self, task_id: str) -> None:
        self.calls.append(("delete", task_id))
        self.tasks.pop(task_id, None)

    def _in(self, column_id: str) -> list[Task]:
        return [t for t in self.tasks.values() if t.column_id == column_id]


@pytest.fixture
def gateway() -> FakeGateway:
    """Columns A and B (unlimited) and C (WIP limit 1); A = [T1, T2]."""
    gw = FakeGateway(
        [
            Column(id="a", name="A"),
            Column(id="b", name="B"),
            Column(id="c", name="C", wip_limit=1),
        ]
    )
    gw.add("T1", "a", 1)
    gw.add("T2", "a", 2)
    return gw


@pytest.fixture
def make_gateway() -> type[FakeGateway]:
    """The fake gateway class, for tests that need their own columns."""
    return FakeGateway
