"""Position assignment for tasks within a column."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..errors import InvalidMoveError, PrecisionExhaustedError
from ..models import Allocation, PositionAssignment, RenumberPlan, TaskSummary

logger = logging.getLogger(__name__)


class PositionAllocator:
    """
    Computes the position value for a task landing at an index in a column.

    Positions are floats. Appending uses ``last + 1`` (``0`` for an empty
    column), inserting at the head uses ``first - 1`` and inserting between
    two tasks uses their midpoint. When two neighbours are too close to
    split, the whole column is renumbered to evenly spaced values and the
    midpoint is taken from the renumbered sequence instead.
    """

    DEFAULT_STEP = 1000.0
    DEFAULT_MIN_GAP = 1e-6
    EMPTY_POSITION = 0.0
    APPEND_INCREMENT = 1.0

    def __init__(
        self,
        step: float = DEFAULT_STEP,
        min_gap: float = DEFAULT_MIN_GAP,
    ) -> None:
        """
        Initialize allocator.

        Args:
            step: Spacing between positions after a renumber
            min_gap: Smallest neighbour gap that may still be split
        """
        if step <= 0:
            raise ValueError("step must be positive")
        if min_gap <= 0:
            raise ValueError("min_gap must be positive")
        if step / 2 < min_gap:
            raise ValueError("step must be at least twice min_gap")
        self.step = step
        self.min_gap = min_gap

    def allocate(self, column_tasks: Sequence[TaskSummary], target_index: int) -> Allocation:
        """
        Allocate a position for a task landing at ``target_index``.

        Args:
            column_tasks: Tasks already in the destination column, ascending
                by position, excluding the moving task
            target_index: Zero-based index the task should occupy

        Returns:
            The new position, plus a renumber plan if the column had to be
            respaced first.

        Raises:
            InvalidMoveError: If target_index is outside ``[0, len]``
        """
        if target_index < 0 or target_index > len(column_tasks):
            raise InvalidMoveError(
                f"Target index {target_index} out of range for column of {len(column_tasks)}"
            )

        try:
            position = self._position_at([t.position for t in column_tasks], target_index)
            logger.debug("Allocated position %r at index %d", position, target_index)
            return Allocation(position)
        except PrecisionExhaustedError as e:
            logger.warning("Renumbering column of %d tasks: %s", len(column_tasks), e)

        plan = self.renumber_plan(column_tasks)
        positions = [a.position for a in plan.assignments]
        position = self._position_at(positions, target_index)
        logger.debug("Allocated position %r at index %d after renumber", position, target_index)
        return Allocation(position, plan)

    def append(self, column_tasks: Sequence[TaskSummary]) -> Allocation:
        """Allocate a position after the last task (task creation)."""
        return self.allocate(column_tasks, len(column_tasks))

    def renumber_plan(self, column_tasks: Sequence[TaskSummary]) -> RenumberPlan:
        """Evenly spaced positions ``0, step, 2*step, ...`` in current order."""
        return RenumberPlan(
            tuple(
                PositionAssignment(task.task_id, index * self.step)
                for index, task in enumerate(column_tasks)
            )
        )

    def _position_at(self, positions: Sequence[float], index: int) -> float:
        if not positions:
            return self.EMPTY_POSITION
        if index == 0:
            return self._below(positions[0])
        if index == len(positions):
            return self._above(positions[-1])
        return self._between(positions[index - 1], positions[index])

    def _below(self, first: float) -> float:
        candidate = first - self.APPEND_INCREMENT
        if not candidate < first:
            raise PrecisionExhaustedError(f"no representable position below {first!r}")
        return candidate

    def _above(self, last: float) -> float:
        candidate = last + self.APPEND_INCREMENT
        if not candidate > last:
            raise PrecisionExhaustedError(f"no representable position above {last!r}")
        return candidate

    def _between(self, lower: float, upper: float) -> float:
        # Also catches ties and inversions in externally loaded data
        if upper - lower < self.min_gap:
            raise PrecisionExhaustedError(f"gap between {lower!r} and {upper!r} too small")
        midpoint = lower + (upper - lower) / 2
        if not lower < midpoint < upper:
            raise PrecisionExhaustedError(f"midpoint of {lower!r} and {upper!r} not representable")
        return midpoint
