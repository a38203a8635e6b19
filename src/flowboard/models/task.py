"""Task domain model."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, Field

from ..utils.datetime import from_iso, to_iso

DEFAULT_PRIORITY = "medium"


class Task(BaseModel):
    """A single card on the board.

    Only ``column_id`` and ``position`` matter to ordering; everything else
    is payload that is carried through moves untouched.
    """

    id: str  # e.g., "fix-login-bug.md" (filesystem), "42" (HTTP API)
    column_id: str
    position: float = 0.0

    # Payload
    title: str | None = None  # Defaults to id-derived title
    description: str = ""
    priority: str = DEFAULT_PRIORITY
    tags: list[str] = Field(default_factory=list)
    created: datetime | None = None
    updated: datetime | None = None

    @property
    def display_title(self) -> str:
        """Title for display - uses ID if title not set."""
        if self.title:
            return self.title
        display = self.id
        if display.endswith(".md"):
            display = display[:-3]
        return display.replace("-", " ").title()

    def summary(self) -> "TaskSummary":
        """Ordering-relevant view of this task."""
        return TaskSummary(self.id, self.column_id, self.position)

    def to_frontmatter(self) -> dict:
        """Convert to dict suitable for YAML front matter."""
        data: dict = {}
        if self.title:
            data["title"] = self.title
        data["column"] = self.column_id
        data["position"] = self.position
        data["priority"] = self.priority
        if self.tags:
            data["tags"] = self.tags
        if self.created:
            data["created"] = to_iso(self.created)
        if self.updated:
            data["updated"] = to_iso(self.updated)
        return data

    @classmethod
    def from_frontmatter(
        cls,
        task_id: str,
        metadata: dict,
        body: str,
        default_column: str,
    ) -> "Task":
        """Create Task from parsed front matter."""
        return cls(
            id=task_id,
            column_id=metadata.get("column", default_column),
            position=float(metadata.get("position", 0)),
            title=metadata.get("title"),
            description=body,
            priority=metadata.get("priority", DEFAULT_PRIORITY),
            tags=metadata.get("tags", []),
            created=from_iso(metadata.get("created")),
            updated=from_iso(metadata.get("updated")),
        )


@dataclass(frozen=True)
class TaskSummary:
    """The slice of a task the ordered column store keeps."""

    task_id: str
    column_id: str
    position: float

