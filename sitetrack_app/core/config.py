"""Central configuration, constants, and shared column definitions."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

# =============================================================================
# Backend Connection Settings
# =============================================================================
BACKEND_DEFAULT_URL = "https://your-deployment.convex.cloud"
TIMEZONE = "Asia/Almaty"
APP_BASE_URL = "https://app.example.com"

# Named Convex functions the dashboard reads from and writes to.
BACKEND_FUNCTIONS: dict[str, str] = {
    "tasks": "constructionTasks:getAll",
    "update_status": "constructionTasks:updateStatus",
    "update_priority": "constructionTasks:updatePriority",
    "update_assignee": "constructionTasks:updateAssignee",
    "statuses": "metadata:getAllStatus",
    "priorities": "metadata:getAllPriorities",
    "labels": "metadata:getAllLabels",
    "projects": "constructionProjects:getAll",
    "project_with_tasks": "constructionProjects:getProjectWithTasks",
    "payments": "finance/payments:getProjectPayments",
    "expenses": "finance/expenses:getProjectExpenses",
    "budgets": "finance/budgets:getProjectBudgets",
    "users": "users:getAll",
}

# Seconds a query snapshot is reused before the deployment is asked again
SNAPSHOT_CACHE_TTL = 30.0

# =============================================================================
# Workflow Status Configuration
# =============================================================================
# Fallback board columns when the deployment returns no status metadata
DEFAULT_STATUSES: Sequence[dict[str, str]] = (
    {"_id": "todo", "name": "To Do", "color": "#6B7280", "iconName": "circle"},
    {"_id": "in_progress", "name": "In Progress", "color": "#3B82F6", "iconName": "timer"},
    {"_id": "review", "name": "In Review", "color": "#F59E0B", "iconName": "alert-circle"},
    {"_id": "done", "name": "Done", "color": "#10B981", "iconName": "check-circle"},
)

# Statuses that close a task (lowercase for matching)
TERMINAL_STATUSES: frozenset[str] = frozenset(
    {
        "done",
        "completed",
        "cancelled",
        "canceled",
        "завершено",
        "готово",
        "отменено",
    }
)

# Board header glyph per status icon name
STATUS_ICONS: dict[str, str] = {
    "circle": "○",
    "timer": "◔",
    "alert-circle": "◐",
    "check-circle": "●",
    "x-circle": "⊗",
}

# =============================================================================
# Priority Configuration
# =============================================================================
# Lower rank sorts first; Urgent is the highest priority.
PRIORITY_RANK: dict[str, int] = {
    "Urgent": 0,
    "High": 1,
    "Medium": 2,
    "Low": 3,
    "None": 4,
}

# Rank used when an item carries an unknown priority
UNRANKED_PRIORITY = 999

PRIORITY_ALIASES: dict[str, str] = {
    "urgent": "Urgent",
    "critical": "Urgent",
    "критический": "Urgent",
    "high": "High",
    "высокий": "High",
    "medium": "Medium",
    "средний": "Medium",
    "low": "Low",
    "низкий": "Low",
    "none": "None",
    "no priority": "None",
}

PRIORITY_COLORS: dict[str, str] = {
    "Urgent": "#EF4444",
    "High": "#F59E0B",
    "Medium": "#3B82F6",
    "Low": "#10B981",
    "None": "#9CA3AF",
}


def normalize_priority_name(priority: str | None) -> str:
    """Normalize a priority name to its canonical form.

    Handles case and whitespace variations and the localized names seeded by
    the backend ("Критический" -> "Urgent"). Unknown names are returned
    cleaned but otherwise untouched so they sort as unranked.
    """
    if priority is None:
        return "None"
    cleaned = re.sub(r"\s+", " ", str(priority)).strip()
    if not cleaned:
        return "None"
    return PRIORITY_ALIASES.get(cleaned.lower(), cleaned)


# =============================================================================
# Gantt Timeline Configuration
# =============================================================================
ZOOM_LEVELS: Sequence[int] = (20, 30, 40, 60, 80)
ZOOM_LABELS: dict[int, str] = {20: "50%", 30: "75%", 40: "100%", 60: "150%", 80: "200%"}
DEFAULT_CELL_WIDTH = 40
DEFAULT_ROW_HEIGHT = 56
VIEW_MODES: Sequence[str] = ("day", "week", "month", "quarter", "year")
DEFAULT_VIEW_MODE = "week"
UNGROUPED_LABEL = "Ungrouped"
DEFAULT_WINDOW_DAYS = 30  # window end fallback when a project has no target date
DEFAULT_TASK_DURATION_DAYS = 7  # bar length for tasks without a due date

# =============================================================================
# Finance Configuration
# =============================================================================
EXPENSE_CATEGORIES: Sequence[str] = (
    "materials",
    "labor",
    "equipment",
    "transport",
    "utilities",
    "permits",
    "insurance",
    "taxes",
    "other",
)
PAYMENT_TYPES: Sequence[str] = ("incoming", "outgoing")
CASH_FLOW_GROUPINGS: Sequence[str] = ("day", "week", "month")
CASH_FLOW_PRESETS: Sequence[str] = ("1m", "3m", "6m", "1y", "all")
CASH_FLOW_EPOCH = date(2020, 1, 1)
VARIANCE_OVERBUDGET_PCT = -10.0
DEFAULT_CURRENCY = "KZT"

# =============================================================================
# UI Default Values
# =============================================================================
DEFAULT_DUE_SOON_DAYS: int = 1
DEFAULT_TOP_N: int = 20
UNASSIGNED_LABEL = "(Unassigned)"

TASK_CORE_COLUMNS: Sequence[str] = (
    "id",
    "identifier",
    "title",
    "status",
    "status_id",
    "priority",
    "priority_rank",
    "assignee",
    "labels",
    "project",
    "created",
    "due_date",
)

DISPLAY_ORDER_DETAIL: Sequence[str] = (
    "Task",
    "title",
    "status",
    "priority",
    "assignee",
    "labels",
    "project",
    "created",
    "due_date",
    "days_overdue",
)

DISPLAY_ORDER_TASK_LIST: Sequence[str] = (
    "Task",
    "title",
    "priority",
    "assignee",
    "status",
    "due_date",
    "days_overdue",
    "project",
    "labels",
)


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000
    download_encoding: str = "utf-8"
    currency: str = DEFAULT_CURRENCY


SETTINGS = AppSettings()
