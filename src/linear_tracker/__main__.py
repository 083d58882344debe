"""CLI entry point for linear-tracker."""

import argparse
from pathlib import Path

from .config import Settings
from .logging import setup_logging
from .models import TaskStatus


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="linear-tracker",
        description="Sync and claim Linear issues as a normalized task list",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Directory containing linear-tracker.yml (default: current directory)",
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

    statuses = [s.value for s in TaskStatus]
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="Verify the API key and configuration")

    list_parser = sub.add_parser("list", help="List tracked tasks")
    list_parser.add_argument("--status", action="append", choices=statuses, default=None)
    list_parser.add_argument("--label", action="append", dest="labels", default=None)
    list_parser.add_argument("--ready", action="store_true", help="Only tasks with no open deps")
    list_parser.add_argument("--limit", type=int, default=None)

    sub.add_parser("next", help="Show the next task to work on")

    show_parser = sub.add_parser("show", help="Show one task")
    show_parser.add_argument("task_id")

    sub.add_parser("sync", help="Fetch all tracked tasks from Linear")

    claim_parser = sub.add_parser("claim", help="Assign a task to yourself and start it")
    claim_parser.add_argument("task_id")

    complete_parser = sub.add_parser("complete", help="Mark a task completed")
    complete_parser.add_argument("task_id")
    complete_parser.add_argument("--reason", default=None, help="Note to add to the issue")

    status_parser = sub.add_parser("status", help="Move a task to a status")
    status_parser.add_argument("task_id")
    status_parser.add_argument("status", choices=statuses)

    sub.add_parser("epics", help="List project epics")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    settings_kwargs: dict = {}
    if args.project_root:
        settings_kwargs["project_root"] = args.project_root
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file

    settings = Settings(**settings_kwargs)
    setup_logging(settings.verbose, settings.log_file)

    # Import here so --help and --version stay fast
    from .cli import commands
    from .cli.output import error
    from .services.config_service import ConfigService
    from .sync.engine import LinearSyncEngine

    # Resolve file config and env overrides together
    config_service = ConfigService(settings.project_root)
    engine = LinearSyncEngine.from_settings(settings, config_service)
    if config_service.config_error:
        # Defaults are used; report and carry on
        error(config_service.config_error)

    # Dispatch to the subcommand; always release the client
    try:
        if args.command == "check":
            exit_code = commands.run_check(engine)
        elif args.command == "list":
            exit_code = commands.run_list(
                engine, args.status, args.labels, ready=args.ready, limit=args.limit
            )
        elif args.command == "next":
            exit_code = commands.run_next(engine)
        elif args.command == "show":
            exit_code = commands.run_show(engine, args.task_id)
        elif args.command == "sync":
            exit_code = commands.run_sync(engine)
        elif args.command == "claim":
            exit_code = commands.run_claim(engine, args.task_id)
        elif args.command == "complete":
            exit_code = commands.run_complete(engine, args.task_id, args.reason)
        elif args.command == "status":
            exit_code = commands.run_status(engine, args.task_id, args.status)
        else:
            exit_code = commands.run_epics(engine)
    finally:
        engine.dispose()

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
