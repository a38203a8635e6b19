"""Board and column state models."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field, field_validator

SORT_POSITION = "position"


class Column(BaseModel):
    """A column and the ordered task ids currently believed to belong to it."""

    id: str
    board_id: str = "default"
    name: str = ""
    wip_limit: int | None = Field(default=None, ge=1)  # None = unlimited
    task_order: list[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.id.replace("_", " ").title()

    def has_capacity_for(self, count: int) -> bool:
        """Check whether the column may hold ``count`` tasks."""
        return self.wip_limit is None or count <= self.wip_limit


class Board(BaseModel):
    """Owning aggregate of columns."""

    id: str = "default"
    name: str = "Board"
    columns: list[Column] = Field(default_factory=list)

    def get_column(self, column_id: str) -> Column | None:
        """Get a column by ID."""
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    @property
    def column_ids(self) -> list[str]:
        return [col.id for col in self.columns]


class ColumnQuery(BaseModel):
    """Filter, sort and page parameters for fetching a column's tasks.

    The same shape describes what a caller is currently displaying, which
    decides whether drag-and-drop reordering is meaningful for the column.
    """

    search: str | None = None
    sort: str = SORT_POSITION
    page: int = Field(default=1, ge=1)
    page_size: int | None = Field(default=None, ge=1)  # None = everything

    VALID_SORTS: ClassVar[tuple[str, ...]] = ("position", "created", "title")

    @field_validator("sort")
    @classmethod
    def validate_sort(cls, v: str) -> str:
        """Validate sort is a supported field."""
        if v not in cls.VALID_SORTS:
            raise ValueError(
                f"Invalid sort '{v}'. Must be one of: {', '.join(cls.VALID_SORTS)}"
            )
        return v

    @property
    def is_reorderable(self) -> bool:
        """True only for the unfiltered, position-sorted first page."""
        return not self.search and self.sort == SORT_POSITION and self.page == 1


# What the UI shows for a column is described with the same parameters.
ColumnViewState = ColumnQuery
