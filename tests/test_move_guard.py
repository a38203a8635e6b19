"""Tests for MoveGuard."""

import pytest

from flowboard.errors import MoveBusyError
from flowboard.services import MoveGuard


class TestMoveGuard:
    """Tests for the per-task in-flight guard."""

    def test_second_move_for_same_task_rejected(self):
        guard = MoveGuard()
        guard.begin_move("T1")

        with pytest.raises(MoveBusyError):
            guard.begin_move("T1")

    def test_different_tasks_independent(self):
        guard = MoveGuard()
        guard.begin_move("T1")
        guard.begin_move("T2")

        assert guard.in_flight() == ["T1", "T2"]

    def test_end_move_frees_slot(self):
        guard = MoveGuard()
        token = guard.begin_move("T1")

        guard.end_move(token)

        assert not guard.is_busy("T1")
        guard.begin_move("T1")

    def test_stale_token_does_not_release_newer_move(self):
        """Ending an old move twice never frees a newer move's slot."""
        guard = MoveGuard()
        old = guard.begin_move("T1")
        guard.end_move(old)
        guard.begin_move("T1")

        guard.end_move(old)

        assert guard.is_busy("T1")
