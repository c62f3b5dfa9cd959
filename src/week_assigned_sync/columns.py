"""Bind board columns to the roles the week sync needs.

Roles are matched by exact column title. The target (Week Assigned) column is
required; the deadline and status columns are optional and their absence only
degrades classification (no deadline -> Not Assigned, no status -> never Done).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .errors import MissingColumnError
from .monday_client import Column


@dataclass(frozen=True)
class ColumnRoleMap:
    target: Column
    deadline: Optional[Column] = None
    status: Optional[Column] = None
    missing: List[str] = field(default_factory=list)

    @property
    def tracked_column_ids(self) -> List[str]:
        """Columns whose changes can alter the Week Assigned label."""
        return [c.id for c in (self.deadline, self.status) if c is not None]


def _find_by_title(columns: Iterable[Column], title: str) -> Optional[Column]:
    for col in columns:
        if col.title == title:
            return col
    return None


def resolve_roles(
    columns: Iterable[Column],
    deadline_title: str = "Internal Deadline",
    target_title: str = "Week Assigned",
    status_title: str = "Status",
) -> ColumnRoleMap:
    """Resolve column roles, raising MissingColumnError when the target column is absent."""

    columns = list(columns)
    deadline = _find_by_title(columns, deadline_title)
    target = _find_by_title(columns, target_title)
    status = _find_by_title(columns, status_title)

    missing: List[str] = []
    if deadline is None:
        missing.append(deadline_title)
    if target is None:
        missing.append(target_title)
    if status is None:
        missing.append(status_title)

    if target is None:
        raise MissingColumnError(f"Missing {target_title} column", missing=missing)

    return ColumnRoleMap(target=target, deadline=deadline, status=status, missing=missing)


def resolve_roles_for_config(columns: Iterable[Column], cfg) -> ColumnRoleMap:
    return resolve_roles(
        columns,
        deadline_title=cfg.deadline_column_title,
        target_title=cfg.target_column_title,
        status_title=cfg.status_column_title,
    )
