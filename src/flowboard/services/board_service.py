"""Service for board state management."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..errors import (
    InvalidMoveError,
    MoveBusyError,
    NotAuthorizedError,
    NotReorderableError,
    TaskNotFoundError,
)
from ..models import (
    Board,
    ColumnChange,
    ColumnViewState,
    MoveOutcome,
    Task,
    TaskSummary,
)
from ..models.task import DEFAULT_PRIORITY
from ..repositories import PersistenceGateway
from .column_store import OrderedColumnStore
from .move_reconciler import MoveReconciler
from .position_allocator import PositionAllocator
from .wip_policy import WipPolicy

logger = logging.getLogger(__name__)


class BoardService:
    """
    Entry point for callers of the ordering engine.

    Loads columns from the persistence gateway into the ordered column
    store, keeps task payloads alongside it, and routes every change to
    ordering through the move reconciler or the gateway.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        allocator: PositionAllocator | None = None,
        refresh_after_confirm: bool = False,
        can_modify: Callable[[str], bool] | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            gateway: Authoritative store
            allocator: Position allocator (defaults to standard spacing)
            refresh_after_confirm: Re-fetch columns after confirmed moves
            can_modify: Predicate deciding whether the actor may modify a
                board, by board ID. Everything is allowed when omitted.
        """
        self.gateway = gateway
        self.store = OrderedColumnStore(allocator)
        self.wip_policy = WipPolicy()
        self.reconciler = MoveReconciler(
            self.store,
            gateway,
            wip_policy=self.wip_policy,
            refresh_after_confirm=refresh_after_confirm,
        )
        self._can_modify = can_modify
        self._board = Board()
        self._tasks: dict[str, Task] = {}

    # --- Loading ---

    async def load_board(self) -> Board:
        """Load every column, its WIP limit and its tasks from the gateway."""
        columns = await self.gateway.list_columns()
        for column in columns:
            column.wip_limit = await self.gateway.get_wip_limit(column.id)
            tasks = await self.gateway.fetch_column_tasks(column.id)
            self._remember(tasks)
            self.store.load_column(column, tasks)

        board_id = columns[0].board_id if columns else self._board.id
        self._board = Board(id=board_id, columns=columns)
        logger.info("Board loaded: %d columns, %d tasks", len(columns), len(self._tasks))
        return self.board()

    async def refresh_column(self, column_id: str) -> list[Task]:
        """Re-fetch one column from the gateway."""
        column = self.store.get_column(column_id)
        tasks = await self.gateway.fetch_column_tasks(column_id)
        self._remember(tasks)
        self.store.load_column(column, tasks)
        return self.tasks_in(column_id)

    def board(self) -> Board:
        """Current board with each column's task order."""
        return self._board.model_copy(
            update={"columns": [self.store.get_column(c) for c in self.store.column_ids]}
        )

    def tasks_in(self, column_id: str) -> list[Task]:
        """Full tasks of a column in position order."""
        return [self._with_placement(s) for s in self.store.get_ordered_tasks(column_id)]

    def get_task(self, task_id: str) -> Task:
        """Get a task with its current column and position."""
        return self._with_placement(self.store.get_task(task_id))

    # --- Task lifecycle ---

    async def create_task(
        self,
        column_id: str,
        title: str,
        description: str = "",
        priority: str = DEFAULT_PRIORITY,
        tags: list[str] | None = None,
    ) -> Task:
        """
        Create a task at the end of a column.

        Raises:
            CapacityExceededError: If the column is at its WIP limit
        """
        self._check_can_modify()
        column = self.store.get_column(column_id)
        self.wip_policy.check(column)

        allocation = self.store.allocator.append(list(self.store.get_ordered_tasks(column_id)))
        if allocation.renumber_plan is not None:
            await self.gateway.persist_renumber(column_id, allocation.renumber_plan.assignments)
            self.store.apply_renumber(column_id, allocation.renumber_plan)

        created = await self.gateway.create_task(
            Task(
                id="",
                column_id=column_id,
                position=allocation.position,
                title=title,
                description=description,
                priority=priority,
                tags=tags or [],
            )
        )
        self._tasks[created.id] = created
        self.store.add_task(created)
        return created

    async def delete_task(self, task_id: str) -> None:
        """
        Delete a task. Its neighbours keep their positions.

        Raises:
            MoveBusyError: If the task has a move in flight
        """
        self._check_can_modify()
        self.store.get_task(task_id)
        if self.reconciler.guard.is_busy(task_id):
            raise MoveBusyError(task_id)

        await self.gateway.delete_task(task_id)
        self.store.remove_task(task_id)
        self._tasks.pop(task_id, None)
        logger.info("Task deleted: %s", task_id)

    # --- Ordering ---

    async def request_move(self, task_id: str, dest_column_id: str, dest_index: int) -> MoveOutcome:
        """Move a task; see MoveReconciler.request_move."""
        self._check_can_modify()
        return await self.reconciler.request_move(task_id, dest_column_id, dest_index)

    async def reorder_column(self, column_id: str, task_ids: Sequence[str]) -> None:
        """
        Replace a column's whole order at once (bulk API clients).

        The new order is respaced evenly and written in one renumber call.

        Raises:
            NotReorderableError: If the column is displayed filtered or paged
            InvalidMoveError: If task_ids is not exactly the column's tasks
            MoveBusyError: If one of the tasks has a move in flight
        """
        self._check_can_modify()
        if not self.store.is_reorderable(column_id):
            raise NotReorderableError(column_id)

        current = self.store.get_ordered_tasks(column_id)
        if sorted(task_ids) != sorted(current.task_ids()) or len(set(task_ids)) != len(task_ids):
            raise InvalidMoveError(f"New order must list exactly the tasks of {column_id}")
        for task_id in task_ids:
            if self.reconciler.guard.is_busy(task_id):
                raise MoveBusyError(task_id)

        plan = self.store.allocator.renumber_plan(
            [self.store.get_task(task_id) for task_id in task_ids]
        )
        await self.gateway.persist_renumber(column_id, plan.assignments)
        self.store.load_column(
            self.store.get_column(column_id),
            [TaskSummary(a.task_id, column_id, a.position) for a in plan.assignments],
        )
        logger.info("Column reordered: %s (%d tasks)", column_id, len(task_ids))

    def is_reorderable(self, column_id: str) -> bool:
        """Whether drag-and-drop reordering is allowed for a column's current view."""
        return self.store.is_reorderable(column_id)

    def set_view_state(self, column_id: str, view: ColumnViewState | None) -> None:
        """Record the filter/sort/page a caller is displaying for a column."""
        self.store.set_view_state(column_id, view)

    def subscribe(self, listener: Callable[[ColumnChange], None]) -> Callable[[], None]:
        """Subscribe to column changes; returns an unsubscribe callable."""
        return self.store.subscribe(listener)

    # --- Private Methods ---

    def _remember(self, tasks: list[Task]) -> None:
        for task in tasks:
            self._tasks[task.id] = task

    def _with_placement(self, summary: TaskSummary) -> Task:
        task = self._tasks.get(summary.task_id)
        if task is None:
            raise TaskNotFoundError(summary.task_id)
        return task.model_copy(update={"column_id": summary.column_id, "position": summary.position})

    def _check_can_modify(self) -> None:
        if self._can_modify is not None and not self._can_modify(self._board.id):
            raise NotAuthorizedError(self._board.id)
