"""Tests for BoardService."""

import asyncio

import pytest

from flowboard.errors import (
    CapacityExceededError,
    InvalidMoveError,
    MoveBusyError,
    NotAuthorizedError,
    NotReorderableError,
)
from flowboard.models import Column, ColumnViewState, MoveStatus
from flowboard.services import BoardService


@pytest.fixture
def service(gateway) -> BoardService:
    """Board service with the shared board already loaded."""
    svc = BoardService(gateway)
    asyncio.run(svc.load_board())
    return svc


class TestLoadBoard:
    """Tests for loading board state."""

    def test_load_board_orders_columns_and_tasks(self, service):
        board = service.board()

        assert board.column_ids == ["a", "b", "c"]
        assert board.get_column("a").task_order == ["T1", "T2"]
        assert board.get_column("c").wip_limit == 1

    def test_tasks_in_returns_full_tasks(self, service):
        tasks = service.tasks_in("a")

        assert [t.title for t in tasks] == ["T1", "T2"]
        assert [t.position for t in tasks] == [1, 2]

    def test_get_task_follows_moves(self, service):
        asyncio.run(service.request_move("T1", "b", 0))

        task = service.get_task("T1")

        assert task.column_id == "b"
        assert task.position == 0
        assert task.title == "T1"

    def test_refresh_column_picks_up_remote_changes(self, service, gateway):
        gateway.add("T9", "b", 5, title="Remote")

        tasks = asyncio.run(service.refresh_column("b"))

        assert [t.id for t in tasks] == ["T9"]


class TestCreateAndDelete:
    """Tests for task creation and deletion."""

    def test_creations_append_with_increasing_positions(self, service):
        async def scenario():
            return [await service.create_task("b", f"Task {i}") for i in range(5)]

        created = asyncio.run(scenario())
        positions = [t.position for t in created]

        assert positions == sorted(set(positions))
        assert positions[0] == 0
        assert service.store.get_ordered_tasks("b").task_ids() == [t.id for t in created]

    def test_create_appends_after_last(self, service):
        created = asyncio.run(service.create_task("a", "Third"))

        assert created.position == 3
        assert service.tasks_in("a")[-1].title == "Third"

    def test_create_respects_wip_limit(self, service, gateway):
        asyncio.run(service.create_task("c", "Only one"))

        with pytest.raises(CapacityExceededError):
            asyncio.run(service.create_task("c", "One too many"))

        assert len(service.tasks_in("c")) == 1
        assert len([t for t in gateway.tasks.values() if t.column_id == "c"]) == 1

    def test_delete_leaves_neighbours_positions(self, make_gateway):
        gateway = make_gateway([Column(id="a")])
        for i, position in enumerate([1, 2, 3]):
            gateway.add(f"T{i + 1}", "a", position)
        service = BoardService(gateway)
        asyncio.run(service.load_board())

        asyncio.run(service.delete_task("T2"))

        assert [(t.id, t.position) for t in service.tasks_in("a")] == [("T1", 1), ("T3", 3)]
        assert "T2" not in gateway.tasks

    def test_delete_rejected_while_move_in_flight(self, service, gateway):
        async def scenario():
            gateway.pause()
            move = asyncio.create_task(service.request_move("T1", "b", 0))
            await asyncio.sleep(0)
            with pytest.raises(MoveBusyError):
                await service.delete_task("T1")
            gateway.release()
            return await move

        outcome = asyncio.run(scenario())

        assert outcome.status == MoveStatus.APPLIED
        assert "T1" in gateway.tasks


class TestReorderColumn:
    """Tests for bulk reordering."""

    def test_reorder_respaces_column(self, service, gateway):
        asyncio.run(service.reorder_column("a", ["T2", "T1"]))

        assert [(t.id, t.position) for t in service.tasks_in("a")] == [("T2", 0), ("T1", 1000)]
        assert gateway.order("a") == ["T2", "T1"]

    def test_reorder_requires_exact_membership(self, service, gateway):
        with pytest.raises(InvalidMoveError):
            asyncio.run(service.reorder_column("a", ["T1"]))
        with pytest.raises(InvalidMoveError):
            asyncio.run(service.reorder_column("a", ["T1", "T1"]))

        assert gateway.persist_calls() == []

    def test_reorder_rejected_for_paged_view(self, service):
        service.set_view_state("a", ColumnViewState(page=2, page_size=1))

        assert not service.is_reorderable("a")
        with pytest.raises(NotReorderableError):
            asyncio.run(service.reorder_column("a", ["T2", "T1"]))


class TestAuthorization:
    """Tests for the optional modification predicate."""

    def test_read_only_actor_cannot_modify(self, gateway):
        service = BoardService(gateway, can_modify=lambda board_id: False)
        asyncio.run(service.load_board())

        with pytest.raises(NotAuthorizedError):
            asyncio.run(service.request_move("T1", "b", 0))
        with pytest.raises(NotAuthorizedError):
            asyncio.run(service.create_task("a", "Nope"))

        assert service.tasks_in("a")[0].id == "T1"

    def test_predicate_receives_board_id(self, gateway):
        seen = []

        def allow(board_id: str) -> bool:
            seen.append(board_id)
            return True

        service = BoardService(gateway, can_modify=allow)
        asyncio.run(service.load_board())
        asyncio.run(service.request_move("T1", "b", 0))

        assert seen == ["default"]


class TestNotifications:
    """Tests for subscription through the service."""

    def test_subscribe_and_unsubscribe(self, service):
        changes = []
        unsubscribe = service.subscribe(changes.append)

        asyncio.run(service.create_task("b", "New"))
        unsubscribe()
        asyncio.run(service.create_task("b", "Unseen"))

        assert [c.column_ids for c in changes] == [("b",)]
