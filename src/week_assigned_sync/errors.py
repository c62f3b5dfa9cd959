from __future__ import annotations

from typing import List, Optional


class WeekSyncError(RuntimeError):
    """Base class for errors raised while syncing Week Assigned columns."""


class NotFoundError(WeekSyncError):
    """Board or item does not exist upstream."""


class TransportError(WeekSyncError):
    """A monday.com API call failed (network, HTTP status or GraphQL errors)."""


class MalformedValueError(WeekSyncError):
    """A column value is present but cannot be parsed."""


class MissingColumnError(WeekSyncError):
    """A board lacks a column required to reconcile it."""

    def __init__(self, message: str, missing: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.missing: List[str] = list(missing or [])
