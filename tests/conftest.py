"""Shared fixtures: an in-memory stand-in for the monday.com API."""

from __future__ import annotations

import json
from datetime import date
from typing import Dict, List, Optional, Sequence

import pytest

from week_assigned_sync.config import Config
from week_assigned_sync.errors import NotFoundError, TransportError
from week_assigned_sync.monday_client import Board, Column, ColumnValue, Item

# Wednesday; this week is Mon 2026-10-19 .. Sun 2026-10-25
TODAY = date(2026, 10, 21)

DEADLINE_COL = Column(id="date4", title="Internal Deadline", type="date")
TARGET_COL = Column(id="status_1", title="Week Assigned", type="status")
STATUS_COL = Column(id="status", title="Status", type="status")


def make_item(
    item_id: str,
    deadline: Optional[str] = None,
    status: Optional[str] = "Working on it",
    week_assigned: Optional[str] = None,
    name: Optional[str] = None,
) -> Item:
    deadline_raw = json.dumps({"date": deadline, "icon": None, "changed_at": "2026-10-01T10:00:00.000Z"}) if deadline else None
    return Item(
        id=item_id,
        name=name or f"Task {item_id}",
        column_values=[
            ColumnValue(id=DEADLINE_COL.id, value=deadline_raw, text=deadline or "", type="date"),
            ColumnValue(id=STATUS_COL.id, value=None, text=status, type="status"),
            ColumnValue(id=TARGET_COL.id, value=None, text=week_assigned, type="status"),
        ],
    )


class FakeMondayAPI:
    """Records writes and applies them, so a second sweep sees the new labels."""

    def __init__(self) -> None:
        self.boards: Dict[str, Board] = {}
        self.items: Dict[str, List[Item]] = {}
        self.writes: List[tuple] = []
        self.fail_writes_for: set = set()
        self.filter_fails = False
        self.items_fail_for: set = set()
        self.get_items_calls: List[tuple] = []

    def add_board(self, board_id: str, name: str, columns: Sequence[Column], items: Sequence[Item] = ()) -> Board:
        board = Board(id=board_id, name=name, columns=list(columns))
        self.boards[board_id] = board
        self.items[board_id] = list(items)
        for item in items:
            item.board_id = board_id
        return board

    def get_board(self, board_id: str) -> Board:
        if board_id not in self.boards:
            raise NotFoundError(f"Board {board_id} not found")
        return self.boards[board_id]

    def get_item(self, item_id: str) -> Item:
        for items in self.items.values():
            for item in items:
                if item.id == item_id:
                    return item
        raise NotFoundError(f"Item {item_id} not found")

    def get_items(self, board_id, exclude_status_column_id=None, exclude_labels=("Done",)) -> List[Item]:
        self.get_items_calls.append((board_id, exclude_status_column_id))
        if board_id in self.items_fail_for:
            raise TransportError("Monday API Request failed: connection reset")
        items = list(self.items.get(board_id, []))
        if exclude_status_column_id and not self.filter_fails:
            items = [
                i for i in items
                if (i.column(exclude_status_column_id).text if i.column(exclude_status_column_id) else None)
                not in exclude_labels
            ]
        return items

    def change_column_value(self, board_id, item_id, column_id, value):
        if item_id in self.fail_writes_for:
            raise TransportError(f"Monday API Error: write rejected for {item_id}")
        self.writes.append((board_id, item_id, column_id, value))
        item = self.get_item(item_id)
        cv = item.column(column_id)
        if cv is None:
            item.column_values.append(ColumnValue(id=column_id, value=json.dumps(value), text=value["label"]))
        else:
            cv.value = json.dumps(value)
            cv.text = value["label"]
        return {"change_column_value": {"id": item_id}}


@pytest.fixture
def cfg() -> Config:
    return Config(monday_api_token="test-token", board_ids=["100"])


@pytest.fixture
def fake_client() -> FakeMondayAPI:
    return FakeMondayAPI()
