"""flowboard - kanban board with ordered columns, optimistic moves and WIP limits."""

__version__ = "0.1.0"
