"""Exception hierarchy for flowboard."""

from __future__ import annotations


class FlowboardError(Exception):
    """Base exception for flowboard errors."""

    pass


# --- Lookup failures ---


class LookupFailure(FlowboardError):
    """A task or column is not known to the board."""

    pass


class TaskNotFoundError(LookupFailure):
    """Task is not present in the local board state."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class ColumnNotFoundError(LookupFailure):
    """Column is not present in the local board state."""

    def __init__(self, column_id: str) -> None:
        super().__init__(f"Column not found: {column_id}")
        self.column_id = column_id


# --- Authorization ---


class NotAuthorizedError(FlowboardError):
    """Actor may not modify the board."""

    def __init__(self, board_id: str) -> None:
        super().__init__(f"Not allowed to modify board {board_id}")
        self.board_id = board_id


# --- Move failures (resolved locally, never reach the network) ---


class MoveError(FlowboardError):
    """Base class for rejected or invalid moves."""

    pass


class InvalidMoveError(MoveError):
    """Move parameters do not describe a slot in the destination column."""

    pass


class CapacityExceededError(MoveError):
    """Destination column is at its WIP limit."""

    def __init__(self, column_id: str, limit: int) -> None:
        super().__init__(f"Column {column_id} is at its WIP limit of {limit}")
        self.column_id = column_id
        self.limit = limit


class MoveBusyError(MoveError):
    """A move for this task is already in flight."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"A move is already in flight for task {task_id}")
        self.task_id = task_id


class NotReorderableError(MoveError):
    """Column view is filtered, sorted or paginated and cannot be reordered."""

    def __init__(self, column_id: str) -> None:
        super().__init__(f"Column {column_id} is not in a reorderable view")
        self.column_id = column_id


class PrecisionExhaustedError(MoveError):
    """No representable position exists between two neighbours.

    Internal to the position allocator; always resolved by renumbering.
    """

    pass


# --- Persistence failures (trigger rollback) ---


class PersistError(FlowboardError):
    """Authoritative store did not accept a write."""

    pass


class PersistConflictError(PersistError):
    """Store rejected the write (deleted task, stale position, ...)."""

    pass


class PersistTransportError(PersistError):
    """Network or timeout failure talking to the store."""

    pass
