"""At-most-one in-flight move per task."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass

from ..errors import MoveBusyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveToken:
    """Proof that the holder owns the in-flight move for a task."""

    task_id: str
    serial: int


class MoveGuard:
    """
    Tracks which tasks have a move in flight.

    A second move for a busy task is rejected rather than queued: the newer
    drag gesture has already superseded whatever the user expected from the
    first. Moves for different tasks are never serialized here.
    """

    def __init__(self) -> None:
        self._tokens: dict[str, MoveToken] = {}
        self._serials = itertools.count(1)

    def begin_move(self, task_id: str) -> MoveToken:
        """
        Claim the move slot for a task.

        Raises:
            MoveBusyError: If the task already has a move in flight
        """
        if task_id in self._tokens:
            logger.debug("Move rejected, task busy: %s", task_id)
            raise MoveBusyError(task_id)
        token = MoveToken(task_id, next(self._serials))
        self._tokens[task_id] = token
        logger.debug("Move slot claimed: %s (#%d)", task_id, token.serial)
        return token

    def end_move(self, token: MoveToken) -> None:
        """Release a move slot. Releasing a stale token does nothing."""
        if self._tokens.get(token.task_id) == token:
            del self._tokens[token.task_id]
            logger.debug("Move slot released: %s (#%d)", token.task_id, token.serial)

    def is_busy(self, task_id: str) -> bool:
        return task_id in self._tokens

    def in_flight(self) -> list[str]:
        """Task ids with a move in flight."""
        return list(self._tokens)
