"""Persistence protocol for authoritative board storage."""

from collections.abc import Sequence
from typing import Protocol

from ..models import Column, ColumnQuery, PositionAssignment, Task


class PersistenceGateway(Protocol):
    """Interface for the authoritative store behind the board.

    All methods are coroutines; the move engine suspends only while one of
    them is awaited. Implementations include:
    - Filesystem (markdown files with front matter)
    - HTTP (REST API)

    Write failures are reported by raising ``PersistConflictError`` (the
    store refused the change) or ``PersistTransportError`` (the store could
    not be reached).
    """

    async def persist_move(self, task_id: str, dest_column_id: str, new_position: float) -> None:
        """Atomically reassign a task's column and position.

        Replaying a move that was already applied succeeds without change.

        Raises:
            PersistConflictError: Task deleted, column unknown or position taken.
            PersistTransportError: Store unreachable.
        """
        ...

    async def persist_renumber(
        self, column_id: str, assignments: Sequence[PositionAssignment]
    ) -> None:
        """Atomically rewrite several positions of one column.

        Raises:
            PersistConflictError: A task is missing or not in the column.
            PersistTransportError: Store unreachable.
        """
        ...

    async def fetch_column_tasks(
        self, column_id: str, query: ColumnQuery | None = None
    ) -> list[Task]:
        """Get a column's tasks, ordered by position unless ``query`` says otherwise."""
        ...

    async def get_wip_limit(self, column_id: str) -> int | None:
        """Get a column's WIP limit, None for unlimited."""
        ...

    async def list_columns(self) -> list[Column]:
        """Get the board's columns in display order (without task order)."""
        ...

    async def create_task(self, task: Task) -> Task:
        """Store a new task that already carries its allocated position.

        Returns:
            The stored task (the ID may be assigned by the store).
        """
        ...

    async def delete_task(self, task_id: str) -> None:
        """Delete a task. Does not raise if the task doesn't exist."""
        ...
