"""Pure helpers to build the board view context for testing (no Streamlit)."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from sitetrack_app.core.config import DEFAULT_DUE_SOON_DAYS, normalize_priority_name
from sitetrack_app.core.models import StatusModel, WorkItemModel
from sitetrack_app.core.status import is_terminal_status
from sitetrack_app.features.kanban.board import Column, build_columns


@dataclass(slots=True)
class BoardContext:
    columns: list[Column]
    total: int = 0
    near_deadline: set[str] = field(default_factory=set)

    def column_for(self, status_id: str) -> Column | None:
        for column in self.columns:
            if column.status.id == status_id:
                return column
        return None


def filter_items(
    items: Iterable[WorkItemModel],
    *,
    project_ids: Iterable[str] | None = None,
    assignees: Iterable[str] | None = None,
    priorities: Iterable[str] | None = None,
    labels: Iterable[str] | None = None,
) -> list[WorkItemModel]:
    """Keep items matching every non-empty filter (an empty filter matches all)."""
    projects = set(project_ids or ())
    people = set(assignees or ())
    levels = {normalize_priority_name(p) for p in priorities or ()}
    tags = set(labels or ())
    out = []
    for item in items:
        if projects and (item.project is None or item.project.id not in projects):
            continue
        if people and (item.assignee is None or item.assignee.name not in people):
            continue
        if levels:
            name = normalize_priority_name(item.priority.name if item.priority else None)
            if name not in levels:
                continue
        if tags and not tags.intersection(lbl.name for lbl in item.labels):
            continue
        out.append(item)
    return out


def near_deadline_ids(
    items: Iterable[WorkItemModel],
    today: date,
    within_days: int = DEFAULT_DUE_SOON_DAYS,
) -> set[str]:
    """Ids of open cards due within ``within_days`` (including overdue ones)."""
    return {
        item.id
        for item in items
        if item.due_date is not None
        and not is_terminal_status(item.status.name)
        and (item.due_date - today).days <= within_days
    }


def build_board_context(
    items: Sequence[WorkItemModel],
    statuses: Sequence[StatusModel],
    *,
    today: date | None = None,
) -> BoardContext:
    columns = build_columns(items, statuses)
    total = sum(column.count for column in columns)
    near = near_deadline_ids(items, today) if today else set()
    return BoardContext(columns=columns, total=total, near_deadline=near)
