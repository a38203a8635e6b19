"""Service layer for business logic."""

from .board_service import BoardService
from .column_store import OrderedColumnStore, OrderedColumnView
from .config_service import ConfigService
from .move_guard import MoveGuard, MoveToken
from .move_reconciler import MoveReconciler
from .position_allocator import PositionAllocator
from .wip_policy import WipDecision, WipPolicy

__all__ = [
    "BoardService",
    "ConfigService",
    "MoveGuard",
    "MoveReconciler",
    "MoveToken",
    "OrderedColumnStore",
    "OrderedColumnView",
    "PositionAllocator",
    "WipDecision",
    "WipPolicy",
]
