from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from rich.console import Console

from .config import load_config
from .monday_client import MondayAPI
from .notifier import SlackNotifier
from .reconcile import WeekAssignedUpdater
from .reporting import print_board_columns, print_sweep_report, write_json


def run_sweep(args: argparse.Namespace) -> int:
    """Sweep all configured boards (the cron entry point). Returns the exit code."""
    console = Console()
    cfg = load_config()

    board_ids = args.board or cfg.board_ids
    console.print("[bold]Week Assigned Sync[/bold]")
    if not board_ids:
        console.print("[yellow]No boards to process. Set MONDAY_BOARD_IDS or pass --board.[/yellow]")
        return 0

    console.print(f"Processing {len(board_ids)} board(s): [dim]{', '.join(board_ids)}[/dim]")
    if args.dry_run:
        console.print("[yellow]Dry run - no column values will be written[/yellow]")

    notifier = None if args.dry_run else SlackNotifier.from_config(cfg)
    updater = WeekAssignedUpdater(cfg, notifier=notifier)
    result = updater.update_all_boards(board_ids=board_ids, dry_run=args.dry_run)

    console.print()
    print_sweep_report(result, console=console)

    output_path = args.output or cfg.output_json_path
    if output_path:
        write_json(result, output_path)
        console.print(f"\nJSON results written to [green]{output_path}[/green]")

    return 1 if result.failed else 0


def show_columns(args: argparse.Namespace) -> int:
    """List boards with their column ids, highlighting the sync columns."""
    cfg = load_config()
    client = MondayAPI.from_config(cfg)
    boards = client.list_boards(limit=args.limit)
    print_board_columns(
        boards,
        deadline_title=cfg.deadline_column_title,
        target_title=cfg.target_column_title,
        status_title=cfg.status_column_title,
    )
    return 0


def serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .server import create_app

    cfg = load_config()
    uvicorn.run(create_app(cfg), host=args.host or cfg.host, port=args.port or cfg.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="week-assigned-sync",
        description="Keep monday.com Week Assigned columns in sync with Internal Deadline dates",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_sweep = sub.add_parser("sweep", help="Reconcile every configured board once")
    p_sweep.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't write column values, just show what would change",
    )
    p_sweep.add_argument(
        "--board",
        action="append",
        metavar="ID",
        help="Board id to process instead of MONDAY_BOARD_IDS (repeatable)",
    )
    p_sweep.add_argument("--output", help="Write the sweep result as JSON to this path")
    p_sweep.set_defaults(func=run_sweep)

    p_cols = sub.add_parser("columns", help="List boards and their column ids")
    p_cols.add_argument("--limit", type=int, default=10, help="Number of boards to list")
    p_cols.set_defaults(func=show_columns)

    p_serve = sub.add_parser("serve", help="Run the webhook server")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
