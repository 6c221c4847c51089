"""Kanban board feature module: status columns and drag-and-drop moves."""

from sitetrack_app.features.kanban.board import (
    CardDrag,
    CardState,
    Column,
    build_columns,
    group_by_status,
    is_actionable_drop,
    on_drop,
    sort_by_priority,
)
from sitetrack_app.features.kanban.context import (
    BoardContext,
    build_board_context,
    filter_items,
    near_deadline_ids,
)

__all__ = [
    "BoardContext",
    "CardDrag",
    "CardState",
    "Column",
    "build_board_context",
    "build_columns",
    "filter_items",
    "group_by_status",
    "is_actionable_drop",
    "near_deadline_ids",
    "on_drop",
    "sort_by_priority",
]
