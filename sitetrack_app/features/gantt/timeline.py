"""Gantt timeline engine: view state, date/pixel mapping, rows, and bar dragging.

The timeline is a plain state object changed only through ``apply(state,
action)``. Positions are derived from the state on every render:

* ``date_to_x`` maps a day to a pixel offset from the window start,
* ``x_to_date`` maps a pixel offset back to the nearest whole day,
* ``assign_rows`` gives each task a row, with a header row per named group.

Dragging a bar shifts start and end by the same number of days. The new
dates land in local state only; persisting them is up to the page embedding
the timeline.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any

from sitetrack_app.core.config import (
    DEFAULT_CELL_WIDTH,
    DEFAULT_ROW_HEIGHT,
    DEFAULT_VIEW_MODE,
    DEFAULT_WINDOW_DAYS,
    UNGROUPED_LABEL,
    VIEW_MODES,
    ZOOM_LEVELS,
)
from sitetrack_app.core.models import ScheduledTask

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TimelineState:
    tasks: tuple[ScheduledTask, ...]
    start_date: date
    end_date: date
    view_mode: str = DEFAULT_VIEW_MODE
    selected_task_id: str | None = None
    hovered_task_id: str | None = None
    is_dragging: bool = False
    dragged_task_id: str | None = None
    cell_width: int = DEFAULT_CELL_WIDTH
    row_height: int = DEFAULT_ROW_HEIGHT
    show_weekends: bool = True
    show_dependencies: bool = True

    def task(self, task_id: str) -> ScheduledTask:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise KeyError(f"Unknown task {task_id!r}")


# ------------------ Actions ------------------
@dataclass(slots=True, frozen=True)
class SetTasks:
    tasks: tuple[ScheduledTask, ...]


@dataclass(slots=True, frozen=True)
class UpdateTask:
    task_id: str
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class SetViewMode:
    view_mode: str


@dataclass(slots=True, frozen=True)
class SetDateRange:
    start_date: date
    end_date: date


@dataclass(slots=True, frozen=True)
class SelectTask:
    task_id: str | None


@dataclass(slots=True, frozen=True)
class HoverTask:
    task_id: str | None


@dataclass(slots=True, frozen=True)
class StartDrag:
    task_id: str


@dataclass(slots=True, frozen=True)
class EndDrag:
    pass


@dataclass(slots=True, frozen=True)
class SetCellWidth:
    width: int


@dataclass(slots=True, frozen=True)
class SetRowHeight:
    height: int


@dataclass(slots=True, frozen=True)
class ToggleWeekends:
    pass


@dataclass(slots=True, frozen=True)
class ToggleDependencies:
    pass


Action = (
    SetTasks
    | UpdateTask
    | SetViewMode
    | SetDateRange
    | SelectTask
    | HoverTask
    | StartDrag
    | EndDrag
    | SetCellWidth
    | SetRowHeight
    | ToggleWeekends
    | ToggleDependencies
)


def _update_task(state: TimelineState, action: UpdateTask) -> TimelineState:
    tasks = tuple(
        replace(task, **action.updates) if task.id == action.task_id else task for task in state.tasks
    )
    return replace(state, tasks=tasks)


def _set_view_mode(state: TimelineState, action: SetViewMode) -> TimelineState:
    if action.view_mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode {action.view_mode!r}")
    return replace(state, view_mode=action.view_mode)


_REDUCERS: dict[type, Callable[[TimelineState, Any], TimelineState]] = {
    SetTasks: lambda s, a: replace(s, tasks=tuple(a.tasks)),
    UpdateTask: _update_task,
    SetViewMode: _set_view_mode,
    SetDateRange: lambda s, a: replace(s, start_date=a.start_date, end_date=a.end_date),
    SelectTask: lambda s, a: replace(s, selected_task_id=a.task_id),
    HoverTask: lambda s, a: replace(s, hovered_task_id=a.task_id),
    StartDrag: lambda s, a: replace(s, is_dragging=True, dragged_task_id=a.task_id),
    EndDrag: lambda s, a: replace(s, is_dragging=False, dragged_task_id=None),
    SetCellWidth: lambda s, a: replace(s, cell_width=a.width),
    SetRowHeight: lambda s, a: replace(s, row_height=a.height),
    ToggleWeekends: lambda s, a: replace(s, show_weekends=not s.show_weekends),
    ToggleDependencies: lambda s, a: replace(s, show_dependencies=not s.show_dependencies),
}


def apply(state: TimelineState, action: Action) -> TimelineState:
    """Return the state that results from ``action``; unknown actions are a no-op."""
    reducer = _REDUCERS.get(type(action))
    if reducer is None:
        logger.warning("Ignoring unknown timeline action %r", action)
        return state
    return reducer(state, action)


# ------------------ Window ------------------
def default_window(tasks: Sequence[ScheduledTask], today: date | None = None) -> tuple[date, date]:
    """Span all tasks, or today plus the default window when there are none."""
    if tasks:
        return min(t.start for t in tasks), max(t.end for t in tasks)
    start = today or date.today()
    return start, start + timedelta(days=DEFAULT_WINDOW_DAYS)


def project_window(start_date: date, target_date: date | None, today: date | None = None) -> tuple[date, date]:
    """Default window for a project: its start to its target date or today + 30 days."""
    if target_date is not None:
        return start_date, target_date
    return start_date, (today or date.today()) + timedelta(days=DEFAULT_WINDOW_DAYS)


def resolve_window(
    default: tuple[date, date],
    custom_start: date | None = None,
    custom_end: date | None = None,
) -> tuple[date, date]:
    """Apply user-picked bounds over the default window.

    A custom end is only honoured when it falls after the effective start.
    """
    start = custom_start or default[0]
    end = default[1]
    if custom_end is not None and custom_end > start:
        end = custom_end
    return start, end


def initial_state(
    tasks: Iterable[ScheduledTask],
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    today: date | None = None,
    cell_width: int = DEFAULT_CELL_WIDTH,
    row_height: int = DEFAULT_ROW_HEIGHT,
    view_mode: str = DEFAULT_VIEW_MODE,
) -> TimelineState:
    task_tuple = tuple(tasks)
    default_start, default_end = default_window(task_tuple, today)
    return TimelineState(
        tasks=task_tuple,
        start_date=start_date or default_start,
        end_date=end_date or default_end,
        view_mode=view_mode,
        cell_width=cell_width,
        row_height=row_height,
    )


# ------------------ Coordinates ------------------
def days_between(start: date, end: date) -> int:
    return (end - start).days


def total_days(state: TimelineState) -> int:
    """Days spanned by the window, never less than one.

    Single-day and inverted windows are scaled as a one-day window rather than
    dividing by zero.
    """
    return max(days_between(state.start_date, state.end_date), 1)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def date_to_x(state: TimelineState, day: date) -> float:
    span = total_days(state)
    return days_between(state.start_date, day) / span * (span * state.cell_width)


def x_to_date(state: TimelineState, x: float) -> date:
    span = total_days(state)
    total_width = span * state.cell_width
    return state.start_date + timedelta(days=_round_half_up(x / total_width * span))


@dataclass(slots=True, frozen=True)
class BarPosition:
    x: float
    width: float


def task_position(state: TimelineState, task: ScheduledTask) -> BarPosition:
    x = date_to_x(state, task.start)
    return BarPosition(x=x, width=date_to_x(state, task.end) - x)


def timeline_width(state: TimelineState) -> float:
    return total_days(state) * state.cell_width


def dates_in_range(state: TimelineState) -> list[date]:
    return [
        state.start_date + timedelta(days=i)
        for i in range(days_between(state.start_date, state.end_date) + 1)
    ]


def group_tasks(tasks: Iterable[ScheduledTask]) -> dict[str, list[ScheduledTask]]:
    groups: dict[str, list[ScheduledTask]] = {}
    for task in tasks:
        groups.setdefault(task.group or UNGROUPED_LABEL, []).append(task)
    return groups


def assign_rows(tasks: Iterable[ScheduledTask]) -> dict[str, int]:
    """Row index per task id; each named group is preceded by a header row."""
    rows: dict[str, int] = {}
    row = 0
    for group, members in group_tasks(tasks).items():
        if group != UNGROUPED_LABEL:
            row += 1
        for task in members:
            rows[task.id] = row
            row += 1
    return rows


def header_rows(tasks: Iterable[ScheduledTask]) -> dict[str, int]:
    """Row index of each named group's header row."""
    headers: dict[str, int] = {}
    row = 0
    for group, members in group_tasks(tasks).items():
        if group != UNGROUPED_LABEL:
            headers[group] = row
            row += 1
        row += len(members)
    return headers


# ------------------ Zoom ------------------
def zoom_in(cell_width: int) -> int:
    idx = ZOOM_LEVELS.index(cell_width) if cell_width in ZOOM_LEVELS else -1
    if idx < len(ZOOM_LEVELS) - 1:
        return ZOOM_LEVELS[idx + 1]
    return cell_width


def zoom_out(cell_width: int) -> int:
    idx = ZOOM_LEVELS.index(cell_width) if cell_width in ZOOM_LEVELS else -1
    if idx > 0:
        return ZOOM_LEVELS[idx - 1]
    return cell_width


# ------------------ Dragging ------------------
@dataclass(slots=True, frozen=True)
class DragConstraints:
    """Box a bar may be dragged within, sized once when the timeline mounts."""

    width: float

    def clamp(self, origin_x: float, bar_width: float, offset_x: float) -> float:
        low = -origin_x
        high = max(self.width - bar_width - origin_x, low)
        return min(max(offset_x, low), high)


@dataclass(slots=True, frozen=True)
class DragSession:
    task_id: str
    origin_x: float
    bar_width: float
    duration: timedelta


def start_drag(state: TimelineState, task_id: str) -> tuple[TimelineState, DragSession]:
    task = state.task(task_id)
    position = task_position(state, task)
    session = DragSession(
        task_id=task_id,
        origin_x=position.x,
        bar_width=position.width,
        duration=task.end - task.start,
    )
    return apply(state, StartDrag(task_id)), session


def end_drag(
    state: TimelineState,
    session: DragSession,
    offset_x: float,
    constraints: DragConstraints | None = None,
) -> TimelineState:
    """Drop the dragged bar ``offset_x`` pixels from where it started."""
    if constraints is not None:
        offset_x = constraints.clamp(session.origin_x, session.bar_width, offset_x)
    new_start = x_to_date(state, session.origin_x + offset_x)
    new_end = new_start + session.duration
    state = apply(state, EndDrag())
    logger.debug("Rescheduled %s to %s..%s", session.task_id, new_start, new_end)
    return apply(state, UpdateTask(session.task_id, {"start": new_start, "end": new_end}))


def cancel_drag(state: TimelineState) -> TimelineState:
    return apply(state, EndDrag())
