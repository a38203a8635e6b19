"""Wiring of settings, persistence backend and board service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from .config import Settings
from .repositories import FilesystemRepository, HttpRepository, PersistenceGateway
from .services import BoardService, ConfigService, PositionAllocator

logger = logging.getLogger(__name__)


def create_gateway(settings: Settings) -> PersistenceGateway:
    """Pick the persistence backend: REST API when configured, else task files."""
    if settings.api_url:
        logger.info("Using board API at %s", settings.api_url)
        return HttpRepository(
            settings.api_url,
            token=settings.api_token,
            timeout=settings.request_timeout,
        )

    config_service = ConfigService(settings.project_root)
    task_root = config_service.task_root
    if config_service.has_config_error:
        logger.warning("Falling back to default board: %s", config_service.config_error)
    logger.info("Using task files in %s", task_root)
    return FilesystemRepository(task_root, config_service)


def create_board_service(settings: Settings, gateway: PersistenceGateway) -> BoardService:
    allocator = PositionAllocator(
        step=settings.renumber_step,
        min_gap=settings.min_position_gap,
    )
    return BoardService(
        gateway,
        allocator=allocator,
        refresh_after_confirm=settings.refresh_after_confirm,
    )


@asynccontextmanager
async def open_board(settings: Settings) -> AsyncIterator[BoardService]:
    """Build a board service, load the board, and close the backend afterwards."""
    gateway = create_gateway(settings)
    try:
        service = create_board_service(settings, gateway)
        await service.load_board()
        yield service
    finally:
        if isinstance(gateway, HttpRepository):
            await gateway.close()
