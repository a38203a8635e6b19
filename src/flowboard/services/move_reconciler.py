"""Optimistic move protocol: apply locally, persist, confirm or roll back."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

from ..errors import MoveBusyError, PersistError
from ..models import (
    AppliedMove,
    ChangeKind,
    MoveOutcome,
    MoveSnapshot,
    MoveState,
    MoveStatus,
    PositionAssignment,
    TaskSummary,
)
from ..repositories import PersistenceGateway
from .column_store import OrderedColumnStore
from .move_guard import MoveGuard
from .wip_policy import WipPolicy

logger = logging.getLogger(__name__)

CANCELLED_REASON = "cancelled"


@dataclass
class _InFlightMove:
    applied: AppliedMove
    snapshot: MoveSnapshot
    renumber_persisted: bool = False
    reverted: list[TaskSummary] = field(default_factory=list)


class MoveReconciler:
    """
    Orchestrates a single move from request to confirmation or rollback.

    Every step up to sending the persist request runs synchronously, so a
    subscriber never observes a half-applied move. The only suspension point
    is the awaited persist call; afterwards the move is either confirmed
    (local state kept) or rolled back to its snapshot.
    """

    def __init__(
        self,
        store: OrderedColumnStore,
        gateway: PersistenceGateway,
        wip_policy: WipPolicy | None = None,
        guard: MoveGuard | None = None,
        refresh_after_confirm: bool = False,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.wip_policy = wip_policy or WipPolicy()
        self.guard = guard or MoveGuard()
        self.refresh_after_confirm = refresh_after_confirm
        self._states: dict[str, MoveState] = {}
        self._pending: dict[str, asyncio.Future[None]] = {}
        self._background: set[asyncio.Future[None]] = set()

    def state_of(self, task_id: str) -> MoveState:
        """Get the state of the latest move requested for a task."""
        return self._states.get(task_id, MoveState.IDLE)

    async def request_move(
        self, task_id: str, dest_column_id: str, dest_index: int
    ) -> MoveOutcome:
        """
        Move a task to ``dest_index`` of ``dest_column_id``.

        Capacity, busy and reorderability rejections are decided before
        anything is mutated or sent. Persistence failures are rolled back
        locally and reported as ``rolled_back``.

        Raises:
            TaskNotFoundError: If the task is not on the board
            ColumnNotFoundError: If the destination column is unknown
            InvalidMoveError: If dest_index is out of range
        """
        current = self.store.get_task(task_id)
        dest = self.store.get_column(dest_column_id)

        if self.store.is_noop(task_id, dest_column_id, dest_index):
            logger.debug("Move of %s onto its own slot ignored", task_id)
            return MoveOutcome(MoveStatus.UNCHANGED, task_id, position=current.position)

        if not self.store.is_reorderable(dest_column_id):
            logger.info("Move of %s rejected: %s is filtered or paged", task_id, dest_column_id)
            return MoveOutcome(
                MoveStatus.REJECTED_NOT_REORDERABLE,
                task_id,
                reason=f"Column {dest.display_name} is filtered, sorted or paged",
            )

        try:
            token = self.guard.begin_move(task_id)
        except MoveBusyError as e:
            return MoveOutcome(MoveStatus.REJECTED_BUSY, task_id, reason=str(e))

        try:
            decision = self.wip_policy.can_accept(dest, task_id)
            if not decision:
                logger.info("Move of %s rejected: %s", task_id, decision.reason)
                return MoveOutcome(MoveStatus.REJECTED_CAPACITY, task_id, reason=decision.reason)

            snapshot = self.store.snapshot(task_id, [dest_column_id])
            applied = self.store.apply_move(task_id, dest_column_id, dest_index)
            self._set_state(task_id, MoveState.OPTIMISTICALLY_APPLIED)
            logger.info(
                "Task moved: %s (%s -> %s[%d])",
                task_id,
                applied.source_column_id,
                dest_column_id,
                dest_index,
            )
            return await self._reconcile(_InFlightMove(applied, snapshot))
        finally:
            self.guard.end_move(token)

    def cancel(self, task_id: str) -> bool:
        """Cancel the in-flight persist request for a task.

        The move is rolled back exactly as if the store had failed.

        Returns:
            True if a request was cancelled
        """
        future = self._pending.get(task_id)
        if future is None or future.done():
            return False
        logger.info("Cancelling in-flight move of %s", task_id)
        future.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every in-flight persist request; returns how many."""
        return sum(1 for task_id in list(self._pending) if self.cancel(task_id))

    async def _reconcile(self, move: _InFlightMove) -> MoveOutcome:
        task_id = move.applied.task_id
        request = asyncio.ensure_future(self._send(move))
        self._pending[task_id] = request
        try:
            await request
        except asyncio.CancelledError:
            self._rollback(move, CANCELLED_REASON)
            if move.renumber_persisted:
                self._spawn(self._compensate(move))
            if _caller_cancelled():
                raise
            return MoveOutcome(MoveStatus.ROLLED_BACK, task_id, reason=CANCELLED_REASON)
        except PersistError as e:
            self._rollback(move, str(e) or type(e).__name__)
            if move.renumber_persisted:
                await self._compensate(move)
            return MoveOutcome(MoveStatus.ROLLED_BACK, task_id, reason=str(e) or type(e).__name__)
        except Exception:
            self._rollback(move, "unexpected error")
            raise
        finally:
            self._pending.pop(task_id, None)

        self._set_state(task_id, MoveState.CONFIRMED)
        columns = list(dict.fromkeys([move.applied.source_column_id, move.applied.dest_column_id]))
        self.store.notify(ChangeKind.CONFIRMED, columns, task_id)
        logger.info("Move confirmed: %s at %r", task_id, move.applied.position)

        if self.refresh_after_confirm:
            await self._refresh(task_id, columns)

        return MoveOutcome(MoveStatus.APPLIED, task_id, position=move.applied.position)

    async def _send(self, move: _InFlightMove) -> None:
        applied = move.applied
        if applied.renumber_plan is not None:
            await self.gateway.persist_renumber(
                applied.dest_column_id, applied.renumber_plan.assignments
            )
            move.renumber_persisted = True
        await self.gateway.persist_move(applied.task_id, applied.dest_column_id, applied.position)

    def _rollback(self, move: _InFlightMove, reason: str) -> None:
        move.reverted = self.store.restore(move.snapshot, move.applied.renumber_plan)
        self._set_state(move.applied.task_id, MoveState.ROLLED_BACK)
        logger.warning("Move rolled back: %s (%s)", move.applied.task_id, reason)

    async def _compensate(self, move: _InFlightMove) -> None:
        """Put back, in the store, the renumbered positions reverted locally."""
        if not move.reverted:
            return
        assignments = [PositionAssignment(s.task_id, s.position) for s in move.reverted]
        try:
            await self.gateway.persist_renumber(move.applied.dest_column_id, assignments)
        except PersistError as e:
            logger.warning(
                "Could not revert renumbered positions in %s: %s",
                move.applied.dest_column_id,
                e,
            )

    async def _refresh(self, task_id: str, column_ids: list[str]) -> None:
        """Reload confirmed columns from the store to pick up normalization."""
        if any(other != task_id for other in self.guard.in_flight()):
            logger.debug("Refresh after %s skipped: other moves in flight", task_id)
            return
        for column_id in column_ids:
            try:
                tasks = await self.gateway.fetch_column_tasks(column_id)
            except PersistError as e:
                logger.warning("Refresh of %s after confirm failed: %s", column_id, e)
                continue
            self.store.load_column(self.store.get_column(column_id), tasks)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        future = asyncio.ensure_future(coro)
        self._background.add(future)
        future.add_done_callback(self._background.discard)

    def _set_state(self, task_id: str, state: MoveState) -> None:
        previous = self._states.get(task_id, MoveState.IDLE)
        self._states[task_id] = state
        logger.debug("Move state %s: %s -> %s", task_id, previous.value, state.value)


def _caller_cancelled() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0
