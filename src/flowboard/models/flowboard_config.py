"""Configuration models for flowboard.yml."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .board import Board, Column


def _validate_identifier(value: str, name: str = "ID") -> str:
    """Validate an identifier is lowercase alphanumeric with underscores."""
    if not value:
        raise ValueError(f"{name} cannot be empty")
    if not value[0].isalpha():
        raise ValueError(f"{name} must start with a letter")
    if not all(c.isalnum() or c == "_" for c in value):
        raise ValueError(f"{name} must be alphanumeric with underscores only")
    if value != value.lower():
        raise ValueError(f"{name} must be lowercase")
    return value


class ColumnConfig(BaseModel):
    """Configuration for a single board column."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    wip_limit: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of tasks in the column (omit for unlimited)",
    )

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Validate column ID is lowercase with underscores only."""
        return _validate_identifier(v, "Column ID")


class BoardConfig(BaseModel):
    """Configuration for the board and its columns."""

    id: str = "default"
    name: str = "Board"
    columns: list[ColumnConfig] = Field(..., min_length=1, max_length=12)

    @field_validator("columns")
    @classmethod
    def validate_columns(cls, v: list[ColumnConfig]) -> list[ColumnConfig]:
        """Validate column IDs are unique."""
        ids = [col.id for col in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Column IDs must be unique")
        return v

    @property
    def column_ids(self) -> list[str]:
        """Get list of column IDs in order."""
        return [col.id for col in self.columns]

    def get_column(self, column_id: str) -> ColumnConfig | None:
        """Get a column config by ID."""
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def get_wip_limit(self, column_id: str) -> int | None:
        """Get the WIP limit for a column, None when unlimited or unknown."""
        col = self.get_column(column_id)
        return col.wip_limit if col else None

    def to_board(self) -> Board:
        """Build an empty Board aggregate from this configuration."""
        return Board(
            id=self.id,
            name=self.name,
            columns=[
                Column(id=col.id, board_id=self.id, name=col.name, wip_limit=col.wip_limit)
                for col in self.columns
            ],
        )

    @classmethod
    def default(cls) -> "BoardConfig":
        """Return default 3-column configuration."""
        return cls(
            columns=[
                ColumnConfig(id="todo", name="To Do"),
                ColumnConfig(id="in_progress", name="In Progress", wip_limit=3),
                ColumnConfig(id="done", name="Done"),
            ],
        )


class FlowboardConfig(BaseModel):
    """Root configuration from flowboard.yml."""

    version: int = 1
    task_root: str = Field(default=".tasks", description="Relative path to tasks directory")
    board: BoardConfig = Field(default_factory=BoardConfig.default)

    @field_validator("task_root")
    @classmethod
    def validate_task_root(cls, v: str) -> str:
        """Validate task_root is a relative path."""
        path = Path(v)
        if path.is_absolute():
            raise ValueError("task_root must be a relative path")
        if ".." in path.parts:
            raise ValueError("task_root must be within the project directory")
        return v

    @classmethod
    def default(cls) -> "FlowboardConfig":
        """Return default configuration."""
        return cls(board=BoardConfig.default())
