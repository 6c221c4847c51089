"""Column labels and hover help for task and finance tables."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import streamlit as st

# raw column -> (label, help text, format key)
# format key: "int", "money", "pct", "date", or None for a plain column
COLUMN_METADATA: dict[str, tuple[str, str, str | None]] = {
    # Tasks
    "identifier": ("ID", "Short task identifier.", None),
    "title": ("Title", "Task title.", None),
    "status": ("Status", "Current workflow status.", None),
    "priority": ("Priority", "Task priority (Urgent, High, Medium, Low, None).", None),
    "assignee": ("Assignee", "Person responsible for the task.", None),
    "labels": ("Labels", "Labels attached to the task.", None),
    "project": ("Project", "Construction project the task belongs to.", None),
    "created": ("Created", "When the task was created.", None),
    "due_date": ("Due", "Due date of the task.", "date"),
    "days_overdue": ("Days Overdue", "Whole days past the due date.", "int"),
    "days_until_due": ("Days Left", "Whole days until the due date.", "int"),
    # Team workload
    "tasks": ("Tasks", "All tasks assigned.", "int"),
    "open": ("Open", "Tasks not yet closed.", "int"),
    "done": ("Done", "Closed tasks.", "int"),
    "overdue": ("Overdue", "Open tasks past their due date.", "int"),
    "urgent_high": ("Urgent/High", "Open tasks with Urgent or High priority.", "int"),
    # Finance
    "amount": ("Amount", "Amount in the project currency.", "money"),
    "planned": ("Planned", "Planned amount from the approved budget.", "money"),
    "actual": ("Actual", "Paid and approved expenses.", "money"),
    "variance": ("Variance", "Planned minus actual.", "money"),
    "variance_percent": ("Variance %", "Variance as a share of planned.", "pct"),
    "total": ("Total", "Sum of amounts.", "money"),
    "count": ("Count", "Number of records.", "int"),
    "contract_value": ("Contract", "Contract value of the project.", "money"),
    "received": ("Received", "Confirmed incoming payments.", "money"),
    "spent": ("Spent", "Paid and approved expenses.", "money"),
    "gross_profit": ("Gross Profit", "Received minus spent.", "money"),
    "profit_margin": ("Margin %", "Gross profit as a share of received.", "pct"),
    "percent_complete": ("Complete %", "Reported project completion.", "pct"),
}


def apply_column_metadata(
    columns: Iterable[str],
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a column_config dictionary with human labels and hover help."""

    config: dict[str, Any] = dict(existing or {})
    for col in columns:
        if col in config:
            continue
        meta = COLUMN_METADATA.get(col)
        if not meta:
            continue
        label, help_text, fmt = meta
        if fmt == "int":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%d")
        elif fmt == "money":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%.0f")
        elif fmt == "pct":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%.1f%%")
        elif fmt == "date":
            config[col] = st.column_config.DateColumn(label, help=help_text)
        else:
            config[col] = st.column_config.Column(label, help=help_text)
    return config
