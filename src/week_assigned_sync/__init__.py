"""Week Assigned sync for monday.com boards."""

from .config import Config, load_config
from .columns import ColumnRoleMap, resolve_roles
from .errors import MalformedValueError, MissingColumnError, NotFoundError, TransportError, WeekSyncError
from .monday_client import Board, Column, ColumnValue, Item, MondayAPI
from .reconcile import BoardResult, ItemResult, Outcome, SweepResult, WeekAssignedUpdater, reconcile_item
from .week_rules import WeekStatus, classify_week, format_status_for_board, parse_deadline

__all__ = [
    "Config",
    "load_config",
    "ColumnRoleMap",
    "resolve_roles",
    "WeekSyncError",
    "NotFoundError",
    "MissingColumnError",
    "TransportError",
    "MalformedValueError",
    "Board",
    "Column",
    "ColumnValue",
    "Item",
    "MondayAPI",
    "BoardResult",
    "ItemResult",
    "Outcome",
    "SweepResult",
    "WeekAssignedUpdater",
    "reconcile_item",
    "WeekStatus",
    "classify_week",
    "format_status_for_board",
    "parse_deadline",
]
