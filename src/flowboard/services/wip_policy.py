"""Work-in-progress limits for columns."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import CapacityExceededError
from ..models import Column

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WipDecision:
    """Whether a column accepts one more task."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


class WipPolicy:
    """Pure, synchronous guard evaluated before any mutation or network call."""

    def can_accept(self, dest_column: Column, moving_task_id: str | None = None) -> WipDecision:
        """
        Check whether ``dest_column`` can take ``moving_task_id``.

        The moving task is not counted, so reordering within a column never
        trips the limit. Pass ``None`` for a task that does not exist yet.
        """
        count = sum(1 for task_id in dest_column.task_order if task_id != moving_task_id)
        if not dest_column.has_capacity_for(count + 1):
            reason = (
                f"Column {dest_column.display_name} is at its WIP limit "
                f"({count}/{dest_column.wip_limit})"
            )
            logger.debug("WIP rejection: %s", reason)
            return WipDecision(False, reason)
        return WipDecision(True)

    def check(self, dest_column: Column, moving_task_id: str | None = None) -> None:
        """Like ``can_accept`` but raises CapacityExceededError on rejection."""
        if not self.can_accept(dest_column, moving_task_id):
            # wip_limit is set whenever can_accept rejects
            raise CapacityExceededError(dest_column.id, dest_column.wip_limit or 0)
