"""Data models."""

from .board import Board, Column, ColumnQuery, ColumnViewState
from .flowboard_config import BoardConfig, ColumnConfig, FlowboardConfig
from .move import (
    Allocation,
    AppliedMove,
    ChangeKind,
    ColumnChange,
    MoveOutcome,
    MoveSnapshot,
    MoveState,
    MoveStatus,
    PositionAssignment,
    RenumberPlan,
)
from .task import Task, TaskSummary

__all__ = [
    "Allocation",
    "AppliedMove",
    "Board",
    "BoardConfig",
    "ChangeKind",
    "Column",
    "ColumnChange",
    "ColumnConfig",
    "ColumnQuery",
    "ColumnViewState",
    "FlowboardConfig",
    "MoveOutcome",
    "MoveSnapshot",
    "MoveState",
    "MoveStatus",
    "PositionAssignment",
    "RenumberPlan",
    "Task",
    "TaskSummary",
]
