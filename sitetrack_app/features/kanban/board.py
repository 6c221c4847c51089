"""Kanban board engine: status columns, priority ordering, and drop handling.

Columns are derived, never stored. Every render regroups the latest task
snapshot by status and reorders each column by priority, so a manual reorder
inside a column does not survive the next render. Only a committed drop onto
a different column changes anything, and it does so through a single status
mutation; the board itself never edits its items.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sitetrack_app.core.mappers import priority_rank
from sitetrack_app.core.models import StatusModel, WorkItemModel

logger = logging.getLogger(__name__)

# (task_id, status_id) -> backend result
StatusMutation = Callable[[str, str], Any]


class CardState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED_SAME_COLUMN = "dropped_same_column"
    DROPPED_MOVED = "dropped_moved"
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class Column:
    status: StatusModel
    items: list[WorkItemModel]

    @property
    def count(self) -> int:
        return len(self.items)


def group_by_status(
    items: Iterable[WorkItemModel],
    statuses: Sequence[StatusModel],
) -> dict[str, list[WorkItemModel]]:
    """Partition items into one bucket per status, in the statuses' order.

    Every status gets a bucket even when empty. Items whose status is not on
    the board are left out.
    """
    buckets: dict[str, list[WorkItemModel]] = {status.id: [] for status in statuses}
    skipped = 0
    for item in items:
        bucket = buckets.get(item.status.id)
        if bucket is None:
            skipped += 1
            continue
        bucket.append(item)
    if skipped:
        logger.debug("Skipped %d task(s) whose status has no column", skipped)
    return buckets


def sort_by_priority(items: Iterable[WorkItemModel]) -> list[WorkItemModel]:
    """Return items ordered Urgent first, keeping input order among equals."""
    return sorted(items, key=lambda item: priority_rank(item.priority))


def build_columns(items: Iterable[WorkItemModel], statuses: Sequence[StatusModel]) -> list[Column]:
    buckets = group_by_status(items, statuses)
    return [Column(status=status, items=sort_by_priority(buckets[status.id])) for status in statuses]


def is_actionable_drop(item: WorkItemModel, target: Column, *, committed: bool) -> bool:
    return committed and item.status.id != target.status.id


def on_drop(
    item: WorkItemModel,
    target: Column,
    submit: StatusMutation,
    *,
    committed: bool = True,
) -> bool:
    """Handle a card released over ``target``.

    Returns True when the status mutation was submitted. Mutation errors
    propagate to the caller.
    """
    if not is_actionable_drop(item, target, committed=committed):
        return False
    logger.debug("Drop %s: %s -> %s", item.identifier, item.status.name, target.status.name)
    submit(item.id, target.status.id)
    return True


class CardDrag:
    """Per-card drag gesture: Idle -> Dragging -> dropped or cancelled."""

    def __init__(self, item: WorkItemModel):
        self.item = item
        self.state = CardState.IDLE

    def begin(self) -> CardState:
        if self.state is not CardState.IDLE:
            raise ValueError(f"Cannot start dragging {self.item.identifier} from {self.state.value}")
        self.state = CardState.DRAGGING
        return self.state

    def cancel(self) -> CardState:
        self._require_dragging()
        self.state = CardState.CANCELLED
        return self.state

    def drop(self, target: Column, submit: StatusMutation, *, committed: bool = True) -> CardState:
        self._require_dragging()
        if not committed:
            self.state = CardState.CANCELLED
        elif on_drop(self.item, target, submit, committed=committed):
            self.state = CardState.DROPPED_MOVED
        else:
            self.state = CardState.DROPPED_SAME_COLUMN
        return self.state

    def _require_dragging(self) -> None:
        if self.state is not CardState.DRAGGING:
            raise ValueError(f"{self.item.identifier} is not being dragged")
