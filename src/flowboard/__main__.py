"""CLI entry point for flowboard."""

import argparse
from pathlib import Path

from .config import Settings
from .logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="flowboard",
        description="Kanban board with ordered columns and WIP limits",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Path to project root containing flowboard.yml (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    init = commands.add_parser("init", help="Generate default flowboard.yml and task directory")
    init.add_argument("--task-root", default=".tasks", help="Task directory (default: .tasks)")

    show = commands.add_parser("show", help="List columns and their tasks in order")
    show.add_argument("column", nargs="?", default=None, help="Only show this column")

    add = commands.add_parser("add", help="Create a task at the end of a column")
    add.add_argument("column", help="Column ID")
    add.add_argument("title", help="Task title")
    add.add_argument("--priority", default="medium", help="Task priority (default: medium)")

    move = commands.add_parser("move", help="Move a task to an index of a column")
    move.add_argument("task_id", help="Task ID")
    move.add_argument("column", help="Destination column ID")
    move.add_argument("index", type=int, help="Zero-based destination index")

    delete = commands.add_parser("delete", help="Delete a task")
    delete.add_argument("task_id", help="Task ID")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    # Build settings from CLI args; environment fills in the rest
    settings_kwargs: dict = {}
    if args.project_root:
        settings_kwargs["project_root"] = args.project_root
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)
    setup_logging(settings.verbose, settings.log_file)

    if args.command == "init":
        from .cli.generate import run_generate

        raise SystemExit(run_generate(settings.project_root, args.task_root))

    # Import here to keep `init` free of backend imports
    from .cli.board import run_board_command

    raise SystemExit(run_board_command(settings, args))


if __name__ == "__main__":
    main()
