"""Gantt timeline feature module: scheduling view with draggable bars."""

from sitetrack_app.features.gantt.context import (
    TimelineContext,
    bars_frame,
    build_timeline_context,
    headers_frame,
)
from sitetrack_app.features.gantt.timeline import (
    DragConstraints,
    DragSession,
    TimelineState,
    apply,
    assign_rows,
    cancel_drag,
    date_to_x,
    dates_in_range,
    default_window,
    end_drag,
    initial_state,
    project_window,
    start_drag,
    task_position,
    total_days,
    x_to_date,
    zoom_in,
    zoom_out,
)

__all__ = [
    "DragConstraints",
    "DragSession",
    "TimelineContext",
    "TimelineState",
    "apply",
    "assign_rows",
    "bars_frame",
    "build_timeline_context",
    "cancel_drag",
    "date_to_x",
    "dates_in_range",
    "default_window",
    "end_drag",
    "headers_frame",
    "initial_state",
    "project_window",
    "start_drag",
    "task_position",
    "total_days",
    "x_to_date",
    "zoom_in",
    "zoom_out",
]
