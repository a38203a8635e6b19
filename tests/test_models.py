"""Unit tests for model edge cases."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from flowboard.models import (
    Column,
    ColumnQuery,
    MoveOutcome,
    MoveStatus,
    PositionAssignment,
    RenumberPlan,
    Task,
    TaskSummary,
)


class TestTaskFrontmatter:
    """Tests for Task front matter conversion."""

    def test_from_frontmatter_defaults(self):
        """Missing keys fall back to the first column, position 0 and medium priority."""
        task = Task.from_frontmatter("task.md", {}, "", default_column="todo")

        assert task.column_id == "todo"
        assert task.position == 0
        assert task.priority == "medium"
        assert task.tags == []

    def test_from_frontmatter_integer_position_becomes_float(self):
        task = Task.from_frontmatter("task.md", {"position": 3}, "", default_column="todo")
        assert isinstance(task.position, float)

    def test_from_frontmatter_accepts_parsed_datetimes(self):
        """YAML may already have turned timestamps into datetimes."""
        created = datetime(2024, 1, 2, tzinfo=UTC)

        task = Task.from_frontmatter(
            "task.md",
            {"created": created, "updated": "2024-01-03T00:00:00Z"},
            "",
            default_column="todo",
        )

        assert task.created == created
        assert task.updated == datetime(2024, 1, 3, tzinfo=UTC)

    def test_to_frontmatter_key_order_and_omissions(self):
        task = Task(id="t.md", column_id="doing", position=1.5, title="T")

        data = task.to_frontmatter()

        assert list(data) == ["title", "column", "position", "priority"]
        assert data["position"] == 1.5

    def test_display_title_from_filename(self):
        assert Task(id="fix-login-bug.md", column_id="todo").display_title == "Fix Login Bug"
        assert Task(id="x.md", column_id="todo", title="Custom").display_title == "Custom"

    def test_summary(self):
        task = Task(id="t.md", column_id="doing", position=2, title="T")
        assert task.summary() == TaskSummary("t.md", "doing", 2)


class TestColumnQuery:
    """Tests for ColumnQuery validation and reorderability."""

    def test_invalid_sort_rejected(self):
        with pytest.raises(ValidationError, match="Invalid sort"):
            ColumnQuery(sort="priority")

    def test_page_must_be_positive(self):
        with pytest.raises(ValidationError):
            ColumnQuery(page=0)

    def test_empty_search_is_still_reorderable(self):
        assert ColumnQuery(search="").is_reorderable
        assert not ColumnQuery(sort="created").is_reorderable


class TestMoveValues:
    """Tests for the small move value types."""

    def test_outcome_ok(self):
        assert MoveOutcome(MoveStatus.APPLIED, "t").ok
        assert MoveOutcome(MoveStatus.UNCHANGED, "t").ok
        assert not MoveOutcome(MoveStatus.ROLLED_BACK, "t").ok
        assert not MoveOutcome(MoveStatus.REJECTED_BUSY, "t").ok

    def test_status_values_are_strings(self):
        assert MoveStatus.REJECTED_CAPACITY == "rejected_capacity"

    def test_renumber_plan_accessors(self):
        plan = RenumberPlan((PositionAssignment("a", 0), PositionAssignment("b", 1000)))

        assert plan.task_ids == ["a", "b"]

    def test_column_capacity(self):
        column = Column(id="doing", wip_limit=2)

        assert column.has_capacity_for(2)
        assert not column.has_capacity_for(3)
        assert Column(id="todo").has_capacity_for(100)
        assert column.display_name == "Doing"
