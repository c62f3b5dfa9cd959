"""Reconcile the Week Assigned column against deadlines and workflow status.

Two entry points share :func:`reconcile_item`:

* ``WeekAssignedUpdater.update_all_boards`` sweeps every configured board
  (scheduled via cron, or triggered manually).
* ``WeekAssignedUpdater.handle_column_change`` reacts to a single monday.com
  column change webhook.

Boards and items are processed sequentially. One item's failure never stops
the rest of its board, and one board's failure never stops the sweep. The
only guard against redundant writes is the "unchanged" comparison; there is
no locking between the webhook path and a running sweep.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .columns import ColumnRoleMap, resolve_roles_for_config
from .config import Config
from .errors import MissingColumnError, WeekSyncError
from .monday_client import Board, Item, MondayAPI
from .week_rules import classify_week, format_status_for_board, parse_deadline


@dataclass(frozen=True)
class Outcome:
    UPDATED: str = "updated"
    SKIPPED: str = "skipped"
    FAILED: str = "failed"


UNCHANGED = "unchanged"

_FROM_ITEM = object()


@dataclass
class ItemResult:
    item_id: str
    item_name: str
    outcome: str
    previous: Optional[str] = None
    new: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "outcome": self.outcome,
            "previous": self.previous,
            "new": self.new,
            "reason": self.reason,
            "error": self.error,
        }


@dataclass
class BoardResult:
    board_id: str
    board_name: Optional[str] = None
    success: bool = True
    reason: Optional[str] = None
    error: Optional[str] = None
    missing_columns: List[str] = field(default_factory=list)
    items: List[ItemResult] = field(default_factory=list)

    def _count(self, outcome: str) -> int:
        return sum(1 for r in self.items if r.outcome == outcome)

    @property
    def total_items(self) -> int:
        return len(self.items)

    @property
    def updated_items(self) -> int:
        return self._count(Outcome.UPDATED)

    @property
    def skipped_items(self) -> int:
        return self._count(Outcome.SKIPPED)

    @property
    def failed_items(self) -> int:
        return self._count(Outcome.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "board_id": self.board_id,
            "board_name": self.board_name,
            "success": self.success,
            "reason": self.reason,
            "error": self.error,
            "missing_columns": list(self.missing_columns),
            "total_items": self.total_items,
            "updated_items": self.updated_items,
            "skipped_items": self.skipped_items,
            "error_items": self.failed_items,
            "items": [r.to_dict() for r in self.items],
        }


@dataclass
class SweepResult:
    started_at: datetime
    finished_at: Optional[datetime] = None
    boards: List[BoardResult] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def successful(self) -> int:
        return sum(1 for b in self.boards if b.success)

    @property
    def failed(self) -> int:
        # boards in ``errors`` raised before producing a BoardResult
        return sum(1 for b in self.boards if not b.success) + len(self.errors)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_seconds": self.duration_seconds,
            "successful": self.successful,
            "failed": self.failed,
            "errors": list(self.errors),
            "board_summaries": [b.to_dict() for b in self.boards],
        }


def read_item_state(item: Item, roles: ColumnRoleMap) -> tuple:
    """Return (raw deadline value, workflow status text, current Week Assigned text)."""

    deadline_raw = None
    if roles.deadline is not None:
        cv = item.column(roles.deadline.id)
        deadline_raw = cv.value if cv else None

    status_text = None
    if roles.status is not None:
        cv = item.column(roles.status.id)
        status_text = cv.text if cv else None

    cv = item.column(roles.target.id)
    current = cv.text if cv else None
    return deadline_raw, status_text, current


def reconcile_item(
    client: MondayAPI,
    board_id: str,
    item: Item,
    roles: ColumnRoleMap,
    today: Optional[date] = None,
    dry_run: bool = False,
    done_label: str = "Done",
    deadline_raw: Any = _FROM_ITEM,
) -> ItemResult:
    """Recompute one item's Week Assigned label and write it if it changed.

    ``deadline_raw`` overrides the item's stored deadline (the webhook payload
    carries the new value). Write failures propagate to the caller.
    """

    stored_deadline, status_text, current = read_item_state(item, roles)
    if deadline_raw is _FROM_ITEM:
        deadline_raw = stored_deadline

    new_status = classify_week(parse_deadline(deadline_raw), status_text, today=today, done_label=done_label)
    payload = format_status_for_board(new_status)

    if payload["label"] == current:
        return ItemResult(
            item_id=item.id,
            item_name=item.name,
            outcome=Outcome.SKIPPED,
            previous=current,
            new=new_status,
            reason=UNCHANGED,
        )

    if dry_run:
        print(f"[DRY RUN] Would update item {item.id} ({item.name}): \"{current or 'Not set'}\" → \"{new_status}\"")
        return ItemResult(
            item_id=item.id,
            item_name=item.name,
            outcome=Outcome.UPDATED,
            previous=current,
            new=new_status,
            reason="dry run",
        )

    print(f"[INFO] Updating item {item.id} ({item.name}): \"{current or 'Not set'}\" → \"{new_status}\"")
    client.change_column_value(board_id, item.id, roles.target.id, payload)

    return ItemResult(
        item_id=item.id,
        item_name=item.name,
        outcome=Outcome.UPDATED,
        previous=current,
        new=new_status,
    )


class WeekAssignedUpdater:
    """Keeps the Week Assigned column current across the configured boards."""

    def __init__(
        self,
        cfg: Config,
        client: Optional[MondayAPI] = None,
        notifier=None,
        today_fn: Optional[Callable[[], date]] = None,
    ) -> None:
        self.cfg = cfg
        self.client = client or MondayAPI.from_config(cfg)
        self.notifier = notifier
        self.today_fn = today_fn or date.today

    def _resolve(self, board: Board) -> ColumnRoleMap:
        return resolve_roles_for_config(board.columns, self.cfg)

    def update_all_boards(self, board_ids: Optional[List[str]] = None, dry_run: bool = False) -> SweepResult:
        board_ids = list(board_ids if board_ids is not None else self.cfg.board_ids)
        result = SweepResult(started_at=datetime.now(tz=timezone.utc))
        print(
            f"[{result.started_at.isoformat()}] Starting Week Assigned update for {len(board_ids)} boards",
            flush=True,
        )

        # Fix "today" once so every item in the sweep is judged against the same week
        today = self.today_fn()

        for board_id in board_ids:
            try:
                result.boards.append(self.update_board(board_id, dry_run=dry_run, today=today))
            except Exception as e:
                print(f"[ERROR] Failed to process board {board_id}: {e}", flush=True)
                result.errors.append({"board_id": str(board_id), "error": str(e)})

        result.finished_at = datetime.now(tz=timezone.utc)
        print(
            f"[{result.finished_at.isoformat()}] Week Assigned update completed in {result.duration_seconds:.1f}s",
            flush=True,
        )
        print(f"[INFO] Results: {result.successful} boards succeeded, {result.failed} boards failed", flush=True)
        for board in result.boards:
            if not board.success:
                print(f"[ERROR] Board {board.board_id}: {board.reason or board.error}", flush=True)
        for err in result.errors:
            print(f"[ERROR] Board {err['board_id']}: {err['error']}", flush=True)

        # Dry runs are not announced
        if self.notifier is not None and not dry_run:
            self.notifier.send_sweep_summary(result)

        return result

    def update_board(self, board_id: str, dry_run: bool = False, today: Optional[date] = None) -> BoardResult:
        board_id = str(board_id)
        print(f"[INFO] Processing board {board_id}...", flush=True)
        if today is None:
            today = self.today_fn()

        try:
            board = self.client.get_board(board_id)
        except WeekSyncError as e:
            print(f"[ERROR] Error processing board {board_id}: {e}", flush=True)
            return BoardResult(board_id=board_id, success=False, error=str(e))

        try:
            roles = self._resolve(board)
        except MissingColumnError as e:
            print(f"[WARNING] Board {board_id} ({board.name}) is missing columns: {', '.join(e.missing)}", flush=True)
            return BoardResult(
                board_id=board_id,
                board_name=board.name,
                success=False,
                reason=f"Missing {self.cfg.target_column_title} column",
                missing_columns=e.missing,
            )

        if roles.missing:
            print(
                f"[WARNING] Board {board_id} ({board.name}) is missing columns: {', '.join(roles.missing)}",
                flush=True,
            )

        try:
            items = self.client.get_items(
                board.id,
                exclude_status_column_id=roles.status.id if roles.status else None,
                exclude_labels=(self.cfg.done_label,),
            )
        except WeekSyncError as e:
            print(f"[ERROR] Could not fetch items for board {board_id}: {e}", flush=True)
            return BoardResult(
                board_id=board_id,
                board_name=board.name,
                success=False,
                error=str(e),
                missing_columns=roles.missing,
            )

        print(f"[INFO] Found {len(items)} active items in board {board.name}", flush=True)

        board_result = BoardResult(board_id=board_id, board_name=board.name, missing_columns=roles.missing)
        for item in items:
            try:
                item_result = reconcile_item(
                    self.client,
                    board.id,
                    item,
                    roles,
                    today=today,
                    dry_run=dry_run,
                    done_label=self.cfg.done_label,
                )
            except Exception as e:
                print(f"[ERROR] Error updating item {item.id} ({item.name}): {e}", flush=True)
                item_result = ItemResult(item_id=item.id, item_name=item.name, outcome=Outcome.FAILED, error=str(e))
            board_result.items.append(item_result)

        print(
            f"[INFO] Board {board.name}: Updated {board_result.updated_items}, "
            f"Skipped {board_result.skipped_items}, Errors {board_result.failed_items}",
            flush=True,
        )
        return board_result

    def run_manually(self, dry_run: bool = False) -> SweepResult:
        print("[INFO] Manually triggering Week Assigned update...", flush=True)
        return self.update_all_boards(dry_run=dry_run)

    def handle_column_change(self, event: Dict[str, Any]) -> ItemResult:
        """Reconcile one item after a monday.com column change webhook.

        Never raises; failures come back as a ``failed`` result so the webhook
        can still be acknowledged.
        """

        board_id = event.get("boardId")
        item_id = event.get("pulseId") or event.get("itemId")
        column_id = event.get("columnId")
        item_name = event.get("pulseName") or ""

        if not board_id or not item_id:
            return ItemResult(
                item_id=str(item_id or ""),
                item_name=item_name,
                outcome=Outcome.SKIPPED,
                reason="missing board or item id",
            )

        try:
            board = self.client.get_board(str(board_id))
            try:
                roles = self._resolve(board)
            except MissingColumnError:
                print(f"[INFO] No \"{self.cfg.target_column_title}\" column on board {board_id}, skipping update")
                return ItemResult(
                    item_id=str(item_id),
                    item_name=item_name,
                    outcome=Outcome.SKIPPED,
                    reason=f"Missing {self.cfg.target_column_title} column",
                )

            if column_id not in roles.tracked_column_ids:
                print(f"[INFO] Column {column_id} updated - not tracked, skipping Week Assigned update")
                return ItemResult(
                    item_id=str(item_id),
                    item_name=item_name,
                    outcome=Outcome.SKIPPED,
                    reason="column not tracked",
                )

            item = self.client.get_item(str(item_id))
            deadline_raw: Any = _FROM_ITEM
            if roles.deadline is not None and column_id == roles.deadline.id:
                deadline_raw = event.get("value")

            result = reconcile_item(
                self.client,
                board.id,
                item,
                roles,
                today=self.today_fn(),
                done_label=self.cfg.done_label,
                deadline_raw=deadline_raw,
            )
        except Exception as e:
            print(f"[ERROR] Error updating Week Assigned status for item {item_id}: {e}", flush=True)
            return ItemResult(item_id=str(item_id), item_name=item_name, outcome=Outcome.FAILED, error=str(e))

        if result.outcome == Outcome.UPDATED:
            print(f"[WEBHOOK] Updated Week Assigned for item {item_id} to: {result.new}", flush=True)
        return result
