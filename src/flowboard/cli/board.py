"""Board commands: show, add, move, delete."""

from __future__ import annotations

import asyncio
import logging
from argparse import Namespace
from collections.abc import Awaitable, Callable

from ..app import open_board
from ..config import Settings
from ..errors import FlowboardError
from ..models import MoveStatus
from ..services import BoardService
from .output import error, header, info, success, task_line

logger = logging.getLogger(__name__)


def run_board_command(settings: Settings, args: Namespace) -> int:
    """Run one board command; returns the exit code."""
    try:
        return asyncio.run(_dispatch(settings, args))
    except FlowboardError as e:
        logger.debug("%s failed: %s", args.command, e)
        error(str(e))
        return 1


async def _dispatch(settings: Settings, args: Namespace) -> int:
    handler = COMMANDS[args.command]
    async with open_board(settings) as service:
        return await handler(service, args)


async def _show(service: BoardService, args: Namespace) -> int:
    board = service.board()
    if args.column is None:
        columns = board.columns
    else:
        column = board.get_column(args.column)
        if column is None:
            error(f"Unknown column: {args.column}")
            return 1
        columns = [column]

    for column in columns:
        limit = f"/{column.wip_limit}" if column.wip_limit is not None else ""
        header(f"{column.display_name} ({len(column.task_order)}{limit})")
        for index, task in enumerate(service.tasks_in(column.id)):
            task_line(index, task.id, task.display_title, task.position)
    return 0


async def _add(service: BoardService, args: Namespace) -> int:
    task = await service.create_task(args.column, args.title, priority=args.priority)
    success(f"Created {task.id} in {args.column} at position {task.position:g}")
    return 0


async def _move(service: BoardService, args: Namespace) -> int:
    outcome = await service.request_move(args.task_id, args.column, args.index)
    if outcome.status == MoveStatus.APPLIED:
        success(
            f"Moved {args.task_id} to {args.column}[{args.index}] "
            f"at position {outcome.position:g}"
        )
        return 0
    if outcome.status == MoveStatus.UNCHANGED:
        info(f"{args.task_id} is already at {args.column}[{args.index}]")
        return 0
    error(f"Move {outcome.status.value}: {outcome.reason}")
    return 1


async def _delete(service: BoardService, args: Namespace) -> int:
    await service.delete_task(args.task_id)
    success(f"Deleted {args.task_id}")
    return 0


COMMANDS: dict[str, Callable[[BoardService, Namespace], Awaitable[int]]] = {
    "show": _show,
    "add": _add,
    "move": _move,
    "delete": _delete,
}
