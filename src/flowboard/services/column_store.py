"""In-memory ordered view of the board's columns."""

from __future__ import annotations

import logging
from bisect import bisect_left
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import overload

from ..errors import ColumnNotFoundError, InvalidMoveError, TaskNotFoundError
from ..models import (
    AppliedMove,
    ChangeKind,
    Column,
    ColumnChange,
    ColumnViewState,
    MoveSnapshot,
    RenumberPlan,
    Task,
    TaskSummary,
)
from .position_allocator import PositionAllocator

logger = logging.getLogger(__name__)

Listener = Callable[[ColumnChange], None]


class OrderedColumnView(Sequence[TaskSummary]):
    """Live, restartable view of one column's tasks in position order.

    Nothing is copied up front; every iteration reads the store as it is at
    that moment.
    """

    def __init__(self, store: OrderedColumnStore, column_id: str) -> None:
        self._store = store
        self.column_id = column_id

    def _order(self) -> list[str]:
        return self._store._require_column(self.column_id).task_order

    def __len__(self) -> int:
        return len(self._order())

    @overload
    def __getitem__(self, index: int) -> TaskSummary: ...

    @overload
    def __getitem__(self, index: slice) -> list[TaskSummary]: ...

    def __getitem__(self, index: int | slice) -> TaskSummary | list[TaskSummary]:
        order = self._order()
        if isinstance(index, slice):
            return [self._store._tasks[task_id] for task_id in order[index]]
        return self._store._tasks[order[index]]

    def __iter__(self) -> Iterator[TaskSummary]:
        for task_id in list(self._order()):
            yield self._store._tasks[task_id]

    def task_ids(self) -> list[str]:
        return list(self._order())

    def __repr__(self) -> str:
        return f"OrderedColumnView({self.column_id!r}, {self.task_ids()!r})"


class OrderedColumnStore:
    """
    Local source of truth for column ordering.

    Holds each column's ordered task ids and each task's cached column and
    position. It is only mutated through ``load_column``, ``add_task``,
    ``remove_task``, ``apply_move``, ``apply_renumber`` and ``restore``;
    after each of them every column is strictly sorted by position and
    holds exactly the tasks whose cached column is that column.
    """

    def __init__(self, allocator: PositionAllocator | None = None) -> None:
        self.allocator = allocator or PositionAllocator()
        self._columns: dict[str, Column] = {}
        self._tasks: dict[str, TaskSummary] = {}
        self._views: dict[str, ColumnViewState] = {}
        self._listeners: list[Listener] = []

    # --- Columns ---

    def load_column(self, column: Column, tasks: Iterable[Task | TaskSummary]) -> None:
        """Replace a column's cached contents with authoritative data."""
        column = column.model_copy(deep=True)
        summaries = [_as_summary(task, column.id) for task in tasks]

        # Drop whatever we previously believed was in this column
        previous = self._columns.get(column.id)
        if previous is not None:
            for task_id in previous.task_order:
                self._tasks.pop(task_id, None)

        # A task now reported here may still be cached in another column
        for summary in summaries:
            stale = self._tasks.get(summary.task_id)
            if stale is not None and stale.column_id != column.id:
                self._columns[stale.column_id].task_order.remove(summary.task_id)

        summaries.sort(key=lambda s: (s.position, s.task_id))
        for earlier, later in zip(summaries, summaries[1:]):
            if earlier.position == later.position:
                logger.warning(
                    "Column %s loaded with duplicate position %r (%s, %s)",
                    column.id,
                    later.position,
                    earlier.task_id,
                    later.task_id,
                )

        for summary in summaries:
            self._tasks[summary.task_id] = summary
        column.task_order = [s.task_id for s in summaries]
        self._columns[column.id] = column
        logger.debug("Loaded column %s with %d tasks", column.id, len(summaries))
        self.notify(ChangeKind.LOADED, [column.id])

    def has_column(self, column_id: str) -> bool:
        return column_id in self._columns

    @property
    def column_ids(self) -> list[str]:
        return list(self._columns)

    def get_column(self, column_id: str) -> Column:
        """Get a copy of a column, including its current task order."""
        return self._require_column(column_id).model_copy(deep=True)

    def count(self, column_id: str) -> int:
        return len(self._require_column(column_id).task_order)

    def get_ordered_tasks(self, column_id: str) -> OrderedColumnView:
        """Get a live view of a column's tasks, ascending by position."""
        self._require_column(column_id)
        return OrderedColumnView(self, column_id)

    # --- Tasks ---

    def has_task(self, task_id: str) -> bool:
        return task_id in self._tasks

    def get_task(self, task_id: str) -> TaskSummary:
        """Get a task's cached column and position."""
        try:
            return self._tasks[task_id]
        except KeyError:
            raise TaskNotFoundError(task_id) from None

    def index_of(self, task_id: str) -> int:
        """Get a task's index within its column."""
        summary = self.get_task(task_id)
        return self._columns[summary.column_id].task_order.index(task_id)

    def add_task(self, task: Task | TaskSummary) -> TaskSummary:
        """Insert a task that already carries its allocated position."""
        summary = _as_summary(task)
        if summary.task_id in self._tasks:
            raise ValueError(f"Task already on board: {summary.task_id}")
        column = self._require_column(summary.column_id)

        positions = [self._tasks[t].position for t in column.task_order]
        if summary.position in positions:
            raise ValueError(f"Position {summary.position!r} already taken in column {column.id}")

        column.task_order.insert(bisect_left(positions, summary.position), summary.task_id)
        self._tasks[summary.task_id] = summary
        self.notify(ChangeKind.ADDED, [column.id], summary.task_id)
        return summary

    def remove_task(self, task_id: str) -> TaskSummary:
        """Remove a task; neighbours keep their positions."""
        summary = self.get_task(task_id)
        self._columns[summary.column_id].task_order.remove(task_id)
        del self._tasks[task_id]
        self.notify(ChangeKind.REMOVED, [summary.column_id], task_id)
        return summary

    # --- Moves ---

    def is_noop(self, task_id: str, dest_column_id: str, dest_index: int) -> bool:
        """Check whether a move would leave the task exactly where it is."""
        summary = self.get_task(task_id)
        return summary.column_id == dest_column_id and self.index_of(task_id) == dest_index

    def apply_move(self, task_id: str, dest_column_id: str, dest_index: int) -> AppliedMove:
        """
        Move a task locally to ``dest_index`` of ``dest_column_id``.

        ``dest_index`` counts the destination's tasks without the moving
        task. Position allocation happens before anything is mutated, so a
        rejected index leaves the store untouched.
        """
        summary = self.get_task(task_id)
        dest = self._require_column(dest_column_id)
        source = self._columns[summary.column_id]

        dest_tasks = [self._tasks[t] for t in dest.task_order if t != task_id]
        allocation = self.allocator.allocate(dest_tasks, dest_index)

        source.task_order.remove(task_id)
        if allocation.renumber_plan is not None:
            self._write_positions(dest, allocation.renumber_plan)

        moved = TaskSummary(task_id, dest_column_id, allocation.position)
        self._tasks[task_id] = moved
        dest.task_order.insert(dest_index, task_id)

        logger.debug(
            "Applied move %s: %s -> %s[%d] at %r",
            task_id,
            source.id,
            dest.id,
            dest_index,
            allocation.position,
        )
        self.notify(ChangeKind.MOVED, _unique([source.id, dest.id]), task_id)
        return AppliedMove(
            task_id=task_id,
            source_column_id=source.id,
            dest_column_id=dest.id,
            position=allocation.position,
            renumber_plan=allocation.renumber_plan,
        )

    def apply_renumber(self, column_id: str, plan: RenumberPlan) -> None:
        """Rewrite every cached position in a column.

        Raises:
            InvalidMoveError: If the plan does not list exactly the column's
                tasks in their current order with increasing positions
        """
        column = self._require_column(column_id)
        if plan.task_ids != column.task_order:
            raise InvalidMoveError(f"Renumber plan does not match column {column_id}")
        self._write_positions(column, plan)
        self.notify(ChangeKind.RENUMBERED, [column_id])

    def _write_positions(self, column: Column, plan: RenumberPlan) -> None:
        positions = [a.position for a in plan.assignments]
        if any(lower >= upper for lower, upper in zip(positions, positions[1:])):
            raise InvalidMoveError("Renumber plan positions must be strictly increasing")
        for assignment in plan.assignments:
            self._tasks[assignment.task_id] = TaskSummary(
                assignment.task_id, column.id, assignment.position
            )
        column.task_order = plan.task_ids

    # --- Snapshot / restore ---

    def snapshot(self, task_id: str, column_ids: Iterable[str] = ()) -> MoveSnapshot:
        """Capture a task's placement and the full state of the given columns."""
        summary = self.get_task(task_id)
        columns = {}
        for column_id in _unique([summary.column_id, *column_ids]):
            column = self._require_column(column_id)
            columns[column_id] = tuple(self._tasks[t] for t in column.task_order)
        return MoveSnapshot(
            task_id=task_id,
            prior_column_id=summary.column_id,
            prior_position=summary.position,
            columns=columns,
        )

    def restore(
        self, snapshot: MoveSnapshot, renumber_plan: RenumberPlan | None = None
    ) -> list[TaskSummary]:
        """
        Revert one move using the snapshot taken before it was applied.

        The moved task goes back to its prior column and position. When the
        move renumbered its destination, pass the plan: tasks still sitting
        at their planned position get their snapshot position back, while
        tasks moved since then by other moves stay where they are.

        Returns:
            The renumbered tasks that were put back, with their restored
            positions
        """
        task_id = snapshot.task_id
        touched = [snapshot.prior_column_id]
        current = self._tasks.get(task_id)
        if current is not None:
            self._columns[current.column_id].task_order.remove(task_id)
            touched.append(current.column_id)

        self._tasks[task_id] = TaskSummary(task_id, snapshot.prior_column_id, snapshot.prior_position)
        self._columns[snapshot.prior_column_id].task_order.append(task_id)

        reverted: list[TaskSummary] = []
        if renumber_plan is not None:
            prior = {e.task_id: e for entries in snapshot.columns.values() for e in entries}
            for assignment in renumber_plan.assignments:
                entry = prior.get(assignment.task_id)
                cached = self._tasks.get(assignment.task_id)
                if (
                    entry is not None
                    and cached is not None
                    and cached.column_id == entry.column_id
                    and cached.position == assignment.position
                ):
                    self._tasks[entry.task_id] = entry
                    reverted.append(entry)
                    touched.append(entry.column_id)

        for column_id in _unique(touched):
            self._resort(self._columns[column_id])

        logger.debug("Restored %s (%d renumbered tasks reverted)", task_id, len(reverted))
        self.notify(ChangeKind.RESTORED, _unique(touched), task_id)
        return reverted

    def _resort(self, column: Column) -> None:
        column.task_order.sort(key=lambda t: (self._tasks[t].position, t))
        positions = [self._tasks[t].position for t in column.task_order]
        if any(lower >= upper for lower, upper in zip(positions, positions[1:])):
            # Reverted positions can collide with a position allocated meanwhile
            logger.warning("Positions collided in column %s after restore; renumbering", column.id)
            summaries = [self._tasks[t] for t in column.task_order]
            self._write_positions(column, self.allocator.renumber_plan(summaries))

    # --- View state ---

    def set_view_state(self, column_id: str, view: ColumnViewState | None) -> None:
        """Record how a column is currently displayed (None = full view)."""
        self._require_column(column_id)
        if view is None:
            self._views.pop(column_id, None)
        else:
            self._views[column_id] = view

    def get_view_state(self, column_id: str) -> ColumnViewState:
        self._require_column(column_id)
        return self._views.get(column_id) or ColumnViewState()

    def is_reorderable(self, column_id: str) -> bool:
        """True when the column shows its full, position-sorted first page."""
        return self.get_view_state(column_id).is_reorderable

    # --- Notifications ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(
        self, kind: ChangeKind, column_ids: Iterable[str], task_id: str | None = None
    ) -> None:
        """Deliver a change notification to every listener."""
        change = ColumnChange(kind, tuple(column_ids), task_id)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Column change listener failed for %s", change)

    # --- Private Methods ---

    def _require_column(self, column_id: str) -> Column:
        try:
            return self._columns[column_id]
        except KeyError:
            raise ColumnNotFoundError(column_id) from None


def _as_summary(task: Task | TaskSummary, column_id: str | None = None) -> TaskSummary:
    if isinstance(task, Task):
        task = task.summary()
    if column_id is not None and task.column_id != column_id:
        return TaskSummary(task.task_id, column_id, task.position)
    return task


def _unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))
