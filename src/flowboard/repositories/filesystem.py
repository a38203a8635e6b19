"""Filesystem-based repository for task storage."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import frontmatter
import yaml

from ..errors import PersistConflictError
from ..models import BoardConfig, Column, ColumnQuery, PositionAssignment, Task
from ..utils import generate_filename, now_utc

if TYPE_CHECKING:
    from ..services.config_service import ConfigService

logger = logging.getLogger(__name__)


class FilesystemRepository:
    """
    Repository for task files stored on the filesystem.

    Tasks are stored as individual .md files with YAML front matter; the
    front matter carries the task's column and position, so each file is
    the authoritative record for its own placement. Columns and WIP limits
    come from flowboard.yml.
    """

    def __init__(self, task_root: Path, config_service: ConfigService | None = None) -> None:
        """
        Initialize repository.

        Args:
            task_root: Path to the tasks directory (e.g., .tasks/)
            config_service: Optional config service for column configuration
        """
        self.task_root = task_root
        self._config_service = config_service

    def _get_board_config(self) -> BoardConfig:
        """Get board config, using default if no config service."""
        if self._config_service:
            return self._config_service.get_board_config()
        return BoardConfig.default()

    def ensure_directory(self) -> None:
        """Create the tasks directory if it doesn't exist."""
        self.task_root.mkdir(parents=True, exist_ok=True)

    # --- Task Operations ---

    def get_by_id(self, task_id: str) -> Task | None:
        """Load a single task by ID."""
        filepath = self.task_root / task_id
        if not filepath.exists():
            return None
        return self._parse_task_file(filepath)

    def save(self, task: Task) -> Task:
        """Create or update the markdown file for a task."""
        self.ensure_directory()

        post = frontmatter.Post(task.description)
        post.metadata = task.to_frontmatter()

        # sort_keys=False preserves key order
        with (self.task_root / task.id).open("w") as f:
            f.write(frontmatter.dumps(post, sort_keys=False))

        return task

    # --- Gateway Operations ---

    async def persist_move(self, task_id: str, dest_column_id: str, new_position: float) -> None:
        """Rewrite a task's column and position."""
        task = self._require_task(task_id)
        self._require_column(dest_column_id)

        if task.column_id == dest_column_id and task.position == new_position:
            logger.debug("persist_move: already applied: %s", task_id)
            return

        for other in self._column_tasks(dest_column_id):
            if other.id != task_id and other.position == new_position:
                raise PersistConflictError(
                    f"Position {new_position!r} in {dest_column_id} is taken by {other.id}"
                )

        self.save(
            task.model_copy(
                update={"column_id": dest_column_id, "position": new_position, "updated": now_utc()}
            )
        )
        logger.info("Persisted move: %s -> %s at %r", task_id, dest_column_id, new_position)

    async def persist_renumber(
        self, column_id: str, assignments: Sequence[PositionAssignment]
    ) -> None:
        """Rewrite several positions of one column; validated before any write."""
        self._require_column(column_id)
        tasks = {task.id: task for task in self._column_tasks(column_id)}

        missing = [a.task_id for a in assignments if a.task_id not in tasks]
        if missing:
            raise PersistConflictError(
                f"Cannot renumber {column_id}: not in column: {', '.join(missing)}"
            )

        for assignment in assignments:
            task = tasks[assignment.task_id]
            if task.position != assignment.position:
                self.save(task.model_copy(update={"position": assignment.position}))
        logger.info("Persisted renumber of %s (%d tasks)", column_id, len(assignments))

    async def fetch_column_tasks(
        self, column_id: str, query: ColumnQuery | None = None
    ) -> list[Task]:
        """Get a column's tasks, filtered, sorted and paged by ``query``."""
        query = query or ColumnQuery()
        tasks = self._column_tasks(column_id)

        if query.search:
            needle = query.search.lower()
            tasks = [
                t
                for t in tasks
                if needle in t.display_title.lower() or needle in t.description.lower()
            ]

        if query.sort == "title":
            tasks.sort(key=lambda t: t.display_title.lower())
        elif query.sort == "created":
            tasks.sort(key=lambda t: (t.created is None, t.created or now_utc()))

        if query.page_size is not None:
            start = (query.page - 1) * query.page_size
            tasks = tasks[start : start + query.page_size]
        return tasks

    async def get_wip_limit(self, column_id: str) -> int | None:
        return self._get_board_config().get_wip_limit(column_id)

    async def list_columns(self) -> list[Column]:
        return self._get_board_config().to_board().columns

    async def create_task(self, task: Task) -> Task:
        """Write a new task file, deriving a unique filename from the title."""
        self._require_column(task.column_id)
        now = now_utc()
        task = task.model_copy(
            update={
                "id": self._unique_filename(task.display_title),
                "created": task.created or now,
                "updated": now,
            }
        )
        self.save(task)
        logger.info("Task created: %s (%s at %r)", task.id, task.column_id, task.position)
        return task

    async def delete_task(self, task_id: str) -> None:
        """Delete a task file; neighbours keep their positions."""
        filepath = self.task_root / task_id
        if filepath.exists():
            filepath.unlink()
            logger.info("Task deleted: %s", task_id)

    # --- Private Methods ---

    def _column_tasks(self, column_id: str) -> list[Task]:
        """Tasks of one column, ascending by position."""
        tasks = [
            task
            for path in self._iter_task_files()
            if (task := self._parse_task_file(path)) and task.column_id == column_id
        ]
        return sorted(tasks, key=lambda t: (t.position, t.id))

    def _require_task(self, task_id: str) -> Task:
        task = self.get_by_id(task_id)
        if task is None:
            raise PersistConflictError(f"Task {task_id} no longer exists")
        return task

    def _require_column(self, column_id: str) -> None:
        if self._get_board_config().get_column(column_id) is None:
            raise PersistConflictError(f"Column {column_id} does not exist")

    def _unique_filename(self, title: str) -> str:
        """Generate a filename from a title, appending numbers if needed."""
        candidate = generate_filename(title)
        counter = 1
        while (self.task_root / candidate).exists():
            candidate = generate_filename(title, counter)
            counter += 1
        return candidate

    def _iter_task_files(self) -> Iterator[Path]:
        """Iterate over all .md files in the task root."""
        if self.task_root.exists():
            yield from sorted(self.task_root.glob("*.md"))

    def _parse_task_file(self, filepath: Path) -> Task | None:
        """Parse a single task file; unparseable files are skipped."""
        config = self._get_board_config()
        try:
            post = frontmatter.load(filepath)
            task = Task.from_frontmatter(
                task_id=filepath.name,
                metadata=post.metadata,
                body=post.content,
                default_column=config.columns[0].id,
            )
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("Skipping unreadable task file %s: %s", filepath.name, e)
            return None

        if config.get_column(task.column_id) is None:
            # Unknown column - show in first column; file keeps its value until next save
            logger.debug("Task %s has unknown column %s", task.id, task.column_id)
            task = task.model_copy(update={"column_id": config.columns[0].id})
        return task
