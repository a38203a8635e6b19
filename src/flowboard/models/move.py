"""Value types produced and consumed by the move engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .task import TaskSummary

@dataclass(frozen=True)
class PositionAssignment:
    """One entry of a bulk position rewrite."""

    task_id: str
    position: float

@dataclass(frozen=True)
class RenumberPlan:
    """Evenly spaced positions for every task of a column, in order."""

    assignments: tuple[PositionAssignment, ...]

    @property
    def task_ids(self) -> list[str]:
        return [a.task_id for a in self.assignments]


@dataclass(frozen=True)
class Allocation:
    """Result of allocating a slot: the new position and an optional renumber."""

    position: float
    renumber_plan: RenumberPlan | None = None

@dataclass(frozen=True)
class AppliedMove:
    """Record of a move applied to the local column store."""

    task_id: str
    source_column_id: str
    dest_column_id: str
    position: float
    renumber_plan: RenumberPlan | None = None


@dataclass(frozen=True)
class MoveSnapshot:
    """State of the affected columns captured before an optimistic move."""

    task_id: str
    prior_column_id: str
    prior_position: float
    columns: dict[str, tuple[TaskSummary, ...]] = field(default_factory=dict)


class MoveState(str, Enum):
    """Lifecycle of a single move."""

    IDLE = "idle"
    OPTIMISTICALLY_APPLIED = "optimistically_applied"
    CONFIRMED = "confirmed"
    ROLLED_BACK = "rolled_back"

class MoveStatus(str, Enum):
    """What happened to a move request."""

    APPLIED = "applied"
    UNCHANGED = "unchanged"
    REJECTED_CAPACITY = "rejected_capacity"
    REJECTED_BUSY = "rejected_busy"
    REJECTED_NOT_REORDERABLE = "rejected_not_reorderable"
    ROLLED_BACK = "rolled_back"

@dataclass(frozen=True)
class MoveOutcome:
    """Result reported to the caller of ``request_move``."""

    status: MoveStatus
    task_id: str
    reason: str | None = None
    position: float | None = None

    @property
    def ok(self) -> bool:
        return self.status in (MoveStatus.APPLIED, MoveStatus.UNCHANGED)

class ChangeKind(str, Enum):
    """Kinds of column store change notifications."""

    LOADED = "loaded"
    ADDED = "added"
    REMOVED = "removed"
    MOVED = "moved"
    RENUMBERED = "renumbered"
    RESTORED = "restored"
    CONFIRMED = "confirmed"

@dataclass(frozen=True)
class ColumnChange:
    """Notification that one or more columns changed."""

    kind: ChangeKind
    column_ids: tuple[str, ...]
    task_id: str | None = None
