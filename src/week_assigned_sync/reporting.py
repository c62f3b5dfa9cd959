from __future__ import annotations

import json
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .columns import resolve_roles
from .errors import MissingColumnError
from .monday_client import Board
from .reconcile import Outcome, SweepResult


def print_sweep_report(result: SweepResult, console: Optional[Console] = None) -> None:
    console = console or Console()

    if not result.boards and not result.errors:
        console.print("[bold yellow]No boards configured. Set MONDAY_BOARD_IDS.[/bold yellow]")
        return

    table = Table(title="Week Assigned Sweep")
    table.add_column("Board")
    table.add_column("Status")
    table.add_column("Items", justify="right")
    table.add_column("Updated", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Notes")

    for b in result.boards:
        name = escape(f"{b.board_name} ({b.board_id})" if b.board_name else b.board_id)
        status = "[green]ok[/green]" if b.success else "[red]failed[/red]"
        notes: List[str] = []
        if b.reason or b.error:
            notes.append(b.reason or b.error)
        if b.missing_columns and b.success:
            notes.append(f"missing: {', '.join(b.missing_columns)}")
        table.add_row(
            name,
            status,
            str(b.total_items),
            str(b.updated_items),
            str(b.skipped_items),
            str(b.failed_items),
            escape("; ".join(notes)),
        )

    for err in result.errors:
        table.add_row(escape(err["board_id"]), "[red]failed[/red]", "0", "0", "0", "0", escape(err["error"]))

    console.print(table)
    console.print(
        f"{result.successful} board(s) succeeded, {result.failed} failed "
        f"[dim]({result.duration_seconds:.1f}s)[/dim]"
    )

    failed_items = [(b, r) for b in result.boards for r in b.items if r.outcome == Outcome.FAILED]
    if failed_items:
        console.print("\n[bold underline]Item errors[/bold underline]")
        for b, r in failed_items:
            console.print(escape(f"  - [{b.board_name or b.board_id}] {r.item_name} ({r.item_id}): {r.error}"))


def print_board_columns(
    boards: List[Board],
    deadline_title: str = "Internal Deadline",
    target_title: str = "Week Assigned",
    status_title: str = "Status",
    console: Optional[Console] = None,
) -> None:
    """List each board's columns, marking the ones bound to a sync role."""
    console = console or Console()
    markers = {
        deadline_title: "deadline",
        target_title: "week assigned (updated)",
        status_title: "status",
    }

    for board in boards:
        console.print(f"\n[bold]Board: {board.name}[/bold] [dim](ID: {board.id})[/dim]")
        for col in board.columns:
            marker = markers.get(col.title)
            suffix = f"  [green]<- {marker}[/green]" if marker else ""
            console.print(f'  - {col.title}: id="{col.id}", type="{col.type}"{suffix}')
        try:
            roles = resolve_roles(board.columns, deadline_title, target_title, status_title)
        except MissingColumnError as e:
            console.print(f"  [red]Cannot sync: missing {', '.join(e.missing)}[/red]")
            continue
        if roles.missing:
            console.print(f"  [yellow]Partial sync: missing {', '.join(roles.missing)}[/yellow]")


def write_json(result: SweepResult, path: str) -> None:
    """Write sweep results to a JSON file for later inspection."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
