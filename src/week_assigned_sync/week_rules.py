from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
import json
from typing import Any, Dict, Optional

from .errors import MalformedValueError


@dataclass(frozen=True)
class WeekStatus:
    COMPLETED: str = "Completed"
    NOT_ASSIGNED: str = "Not Assigned"
    THIS_WEEK: str = "This Week"
    NEXT_WEEK: str = "Next Week"
    FUTURE: str = "Future"
    PAST_DUE: str = "Past Due"


ALL_WEEK_STATUSES = (
    WeekStatus.COMPLETED,
    WeekStatus.NOT_ASSIGNED,
    WeekStatus.THIS_WEEK,
    WeekStatus.NEXT_WEEK,
    WeekStatus.FUTURE,
    WeekStatus.PAST_DUE,
)

# Status column payloads, keyed by week label.
STATUS_LABELS: Dict[str, Dict[str, str]] = {label: {"label": label} for label in ALL_WEEK_STATUSES}

DONE_STATUS = "done"


@dataclass(frozen=True)
class WeekWindow:
    """Inclusive Monday..Sunday date range."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def shifted(self, days: int) -> "WeekWindow":
        delta = timedelta(days=days)
        return WeekWindow(start=self.start + delta, end=self.end + delta)


def _as_date(value: date) -> date:
    # datetime is a subclass of date; drop the time of day
    if isinstance(value, datetime):
        return value.date()
    return value


def week_window(today: date) -> WeekWindow:
    """Return the Monday-start week containing ``today``."""
    today = _as_date(today)
    monday = today - timedelta(days=today.weekday())
    return WeekWindow(start=monday, end=monday + timedelta(days=6))


def is_done(workflow_status: Optional[str], done_label: str = DONE_STATUS) -> bool:
    if not workflow_status:
        return False
    return workflow_status.strip().lower() == done_label.strip().lower()


def classify_week(
    deadline: Optional[date],
    workflow_status: Optional[str],
    today: Optional[date] = None,
    done_label: str = DONE_STATUS,
) -> str:
    """Classify an item's deadline relative to the current week.

    Rules, first match wins:
    1. workflow status "Done" (any case) -> Completed
    2. no deadline -> Not Assigned
    3. deadline in this week -> This Week, in next week -> Next Week,
       after next week -> Future, anything earlier -> Past Due
    """

    if is_done(workflow_status, done_label):
        return WeekStatus.COMPLETED

    if deadline is None:
        return WeekStatus.NOT_ASSIGNED

    if today is None:
        today = date.today()

    deadline = _as_date(deadline)
    current = week_window(today)
    following = current.shifted(7)

    if current.contains(deadline):
        return WeekStatus.THIS_WEEK
    if following.contains(deadline):
        return WeekStatus.NEXT_WEEK
    if deadline > following.end:
        return WeekStatus.FUTURE
    return WeekStatus.PAST_DUE


def parse_deadline_strict(raw: Any) -> Optional[date]:
    """Parse a date column value, raising MalformedValueError on garbage.

    Accepts the monday.com raw JSON (``{"date": "2024-05-06", "time": null}``),
    an already decoded dict, a bare ISO date string, or a date/datetime.
    ``None`` and empty values mean "no deadline".
    """

    if raw is None:
        return None
    if isinstance(raw, date):
        return _as_date(raw)

    if isinstance(raw, str):
        text = raw.strip()
        if not text or text == "null":
            return None
        if text.startswith("{"):
            try:
                raw = json.loads(text)
            except json.JSONDecodeError as e:
                raise MalformedValueError(f"Deadline value is not valid JSON: {text!r}") from e
        else:
            raw = text

    if isinstance(raw, dict):
        raw = raw.get("date")
        if not raw:
            return None

    if not isinstance(raw, str):
        raise MalformedValueError(f"Unsupported deadline value: {raw!r}")

    try:
        # Accept "YYYY-MM-DD" and full ISO timestamps
        return date.fromisoformat(raw.strip()[:10])
    except ValueError as e:
        raise MalformedValueError(f"Deadline is not an ISO date: {raw!r}") from e


def parse_deadline(raw: Any) -> Optional[date]:
    """Lenient variant of :func:`parse_deadline_strict`: malformed values count as absent."""
    try:
        return parse_deadline_strict(raw)
    except MalformedValueError:
        return None


def format_status_for_board(label: str) -> Dict[str, str]:
    """Status column payload for a week label. Unknown labels pass through."""
    return dict(STATUS_LABELS.get(label, {"label": label}))
