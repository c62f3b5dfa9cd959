from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Dict, Iterable, List, Optional, Sequence

import requests

from .config import DEFAULT_API_URL
from .errors import NotFoundError, TransportError


@dataclass
class Column:
    id: str
    title: str
    type: Optional[str] = None


@dataclass
class Board:
    id: str
    name: str
    columns: List[Column] = field(default_factory=list)


@dataclass
class ColumnValue:
    id: str
    value: Optional[str]  # raw JSON string as returned by the API
    text: Optional[str]
    type: Optional[str] = None


@dataclass
class Item:
    id: str
    name: str
    column_values: List[ColumnValue] = field(default_factory=list)
    board_id: Optional[str] = None

    def column(self, column_id: str) -> Optional[ColumnValue]:
        for cv in self.column_values:
            if cv.id == column_id:
                return cv
        return None


_ITEM_FIELDS = """
    id
    name
    column_values {
      id
      value
      text
      type
    }
"""

BOARD_QUERY = """
query($boardId: ID!) {
  boards(ids: [$boardId]) {
    id
    name
    columns {
      id
      title
      type
    }
  }
}
"""

BOARDS_QUERY = """
query($limit: Int!) {
  boards(limit: $limit) {
    id
    name
    columns {
      id
      title
      type
    }
  }
}
"""

ITEM_QUERY = """
query($itemId: ID!) {
  items(ids: [$itemId]) {
    %s
    board {
      id
    }
  }
}
""" % _ITEM_FIELDS

ITEMS_PAGE_QUERY = """
query($boardId: ID!, $limit: Int!, $queryParams: ItemsQuery) {
  boards(ids: [$boardId]) {
    items_page(limit: $limit, query_params: $queryParams) {
      cursor
      items {
        %s
      }
    }
  }
}
""" % _ITEM_FIELDS

NEXT_ITEMS_PAGE_QUERY = """
query($cursor: String!, $limit: Int!) {
  next_items_page(cursor: $cursor, limit: $limit) {
    cursor
    items {
      %s
    }
  }
}
""" % _ITEM_FIELDS

CHANGE_COLUMN_VALUE_MUTATION = """
mutation($boardId: ID!, $itemId: ID!, $columnId: String!, $value: JSON!) {
  change_column_value(board_id: $boardId, item_id: $itemId, column_id: $columnId, value: $value) {
    id
  }
}
"""


def _parse_board(raw: Dict[str, Any]) -> Board:
    return Board(
        id=str(raw["id"]),
        name=raw.get("name", ""),
        columns=[
            Column(id=c["id"], title=c.get("title", ""), type=c.get("type"))
            for c in raw.get("columns") or []
        ],
    )


def _parse_item(raw: Dict[str, Any], board_id: Optional[str] = None) -> Item:
    board = raw.get("board") or {}
    return Item(
        id=str(raw["id"]),
        name=raw.get("name", ""),
        column_values=[
            ColumnValue(id=cv["id"], value=cv.get("value"), text=cv.get("text"), type=cv.get("type"))
            for cv in raw.get("column_values") or []
        ],
        board_id=str(board["id"]) if board.get("id") else board_id,
    )


class MondayAPI:
    """Thin wrapper over the monday.com GraphQL API for the operations we need."""

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        api_version: Optional[str] = None,
        timeout: int = 30,
        page_size: int = 500,
        max_pages: int = 20,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url
        self.timeout = timeout
        self.page_size = page_size
        self.max_pages = max_pages
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": token, "Content-Type": "application/json"})
        if api_version:
            self.session.headers["API-Version"] = api_version

    @classmethod
    def from_config(cls, cfg) -> "MondayAPI":
        return cls(
            token=cfg.monday_api_token,
            api_url=cfg.monday_api_url,
            api_version=cfg.monday_api_version,
            timeout=cfg.request_timeout,
            page_size=cfg.page_size,
            max_pages=cfg.max_pages,
        )

    def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run a GraphQL query or mutation and return its ``data`` object."""
        try:
            resp = self.session.post(
                self.api_url,
                json={"query": query, "variables": variables or {}},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Monday API request failed: {e}") from e

        if resp.status_code != 200:
            raise TransportError(f"Monday API error: {resp.status_code} {resp.text[:500]}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise TransportError(f"Failed to parse Monday API response: {e}") from e

        if payload.get("errors"):
            raise TransportError(f"Monday API Error: {json.dumps(payload['errors'])}")
        if payload.get("error_message"):
            raise TransportError(f"Monday API Error: {payload['error_message']}")

        return payload.get("data") or {}

    def get_board(self, board_id: str) -> Board:
        data = self.query(BOARD_QUERY, {"boardId": str(board_id)})
        boards = data.get("boards") or []
        if not boards:
            raise NotFoundError(f"Board {board_id} not found")
        return _parse_board(boards[0])

    def list_boards(self, limit: int = 10) -> List[Board]:
        data = self.query(BOARDS_QUERY, {"limit": limit})
        return [_parse_board(b) for b in data.get("boards") or []]

    def get_item(self, item_id: str) -> Item:
        data = self.query(ITEM_QUERY, {"itemId": str(item_id)})
        items = data.get("items") or []
        if not items:
            raise NotFoundError(f"Item {item_id} not found")
        return _parse_item(items[0])

    def iter_board_items(
        self,
        board_id: str,
        query_params: Optional[Dict[str, Any]] = None,
    ) -> Iterable[Item]:
        """Yield items on a board, following the items_page cursor up to ``max_pages``."""

        variables: Dict[str, Any] = {"boardId": str(board_id), "limit": self.page_size}
        if query_params:
            variables["queryParams"] = query_params
        data = self.query(ITEMS_PAGE_QUERY, variables)

        boards = data.get("boards") or []
        if not boards:
            raise NotFoundError(f"Board {board_id} not found")
        page = boards[0].get("items_page") or {}

        pages = 1
        while True:
            for raw in page.get("items") or []:
                yield _parse_item(raw, board_id=str(board_id))

            cursor = page.get("cursor")
            if not cursor:
                break
            if pages >= self.max_pages:
                print(
                    f"[WARNING] Board {board_id}: stopped after {pages} pages of {self.page_size} items",
                    flush=True,
                )
                break

            data = self.query(NEXT_ITEMS_PAGE_QUERY, {"cursor": cursor, "limit": self.page_size})
            page = data.get("next_items_page") or {}
            pages += 1

    def get_items(
        self,
        board_id: str,
        exclude_status_column_id: Optional[str] = None,
        exclude_labels: Sequence[str] = ("Done",),
    ) -> List[Item]:
        """Return a board's items, excluding the given status labels when possible.

        If the server-side status filter fails, the unfiltered item list is
        returned instead. Failure of the unfiltered fetch is raised.
        """

        if exclude_status_column_id:
            query_params = {
                "rules": [
                    {
                        "column_id": exclude_status_column_id,
                        "compare_value": list(exclude_labels),
                        "operator": "not_any_of",
                    }
                ],
                "operator": "and",
            }
            try:
                return list(self.iter_board_items(board_id, query_params=query_params))
            except TransportError as e:
                print(f"[WARNING] Failed to filter by status, fetching all items: {e}", flush=True)

        return list(self.iter_board_items(board_id))

    def change_column_value(self, board_id: str, item_id: str, column_id: str, value: Any) -> Dict[str, Any]:
        """Write a single column value. ``value`` is JSON-encoded for the API."""
        return self.query(
            CHANGE_COLUMN_VALUE_MUTATION,
            {
                "boardId": str(board_id),
                "itemId": str(item_id),
                "columnId": column_id,
                "value": json.dumps(value),
            },
        )
