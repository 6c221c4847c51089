"""Pure helpers to build the timeline view context for testing (no Streamlit)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

import pandas as pd

from sitetrack_app.core.models import ProjectModel, ScheduledTask
from sitetrack_app.features.gantt.timeline import (
    TimelineState,
    assign_rows,
    dates_in_range,
    header_rows,
    initial_state,
    project_window,
    resolve_window,
    task_position,
    timeline_width,
)

BAR_COLUMNS = [
    "id",
    "name",
    "group",
    "row",
    "x",
    "x_end",
    "width",
    "start",
    "end",
    "duration_days",
    "progress",
    "color",
    "assignee",
    "selected",
    "dragging",
]


@dataclass(slots=True)
class TimelineContext:
    state: TimelineState
    bars: pd.DataFrame
    headers: pd.DataFrame
    days: list[date]
    width: float


def bars_frame(state: TimelineState) -> pd.DataFrame:
    """One row per task bar with pixel coordinates for the current window."""
    rows = assign_rows(state.tasks)
    records = []
    for task in state.tasks:
        pos = task_position(state, task)
        records.append(
            {
                "id": task.id,
                "name": task.name,
                "group": task.group,
                "row": rows[task.id],
                "x": pos.x,
                "x_end": pos.x + pos.width,
                "width": pos.width,
                "start": task.start,
                "end": task.end,
                "duration_days": (task.end - task.start).days + 1,
                "progress": task.progress,
                "color": task.color,
                "assignee": task.assignee,
                "selected": task.id == state.selected_task_id,
                "dragging": task.id == state.dragged_task_id,
            }
        )
    if not records:
        return pd.DataFrame(columns=BAR_COLUMNS)
    return pd.DataFrame.from_records(records, columns=BAR_COLUMNS)


def headers_frame(tasks: Sequence[ScheduledTask]) -> pd.DataFrame:
    headers = header_rows(tasks)
    return pd.DataFrame({"group": list(headers), "row": list(headers.values())})


def build_timeline_context(
    tasks: Sequence[ScheduledTask],
    project: ProjectModel | None = None,
    *,
    custom_start: date | None = None,
    custom_end: date | None = None,
    cell_width: int | None = None,
    today: date | None = None,
    state: TimelineState | None = None,
) -> TimelineContext:
    """Build the window, state, and chart frames for a project's timeline.

    When ``state`` is given (a previous render kept in session) it is reused
    as is; otherwise a fresh state is created from ``tasks``.
    """
    if state is None:
        if project is not None and project.start_date is not None:
            default = project_window(project.start_date, project.target_date, today)
            start, end = resolve_window(default, custom_start, custom_end)
        elif custom_start or custom_end:
            defaults = initial_state(tasks, today=today)
            start, end = resolve_window((defaults.start_date, defaults.end_date), custom_start, custom_end)
        else:
            start = end = None
        kwargs = {"cell_width": cell_width} if cell_width else {}
        state = initial_state(tasks, start_date=start, end_date=end, today=today, **kwargs)
    return TimelineContext(
        state=state,
        bars=bars_frame(state),
        headers=headers_frame(state.tasks),
        days=dates_in_range(state),
        width=timeline_width(state),
    )
