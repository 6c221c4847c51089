from datetime import date

import pytest

from sitetrack_app.core.models import (
    LabelModel,
    PriorityModel,
    ProjectModel,
    StatusModel,
    UserModel,
    WorkItemModel,
)
from sitetrack_app.features.kanban import (
    CardDrag,
    CardState,
    build_board_context,
    build_columns,
    filter_items,
    group_by_status,
    near_deadline_ids,
    on_drop,
    sort_by_priority,
)

TODO = StatusModel(id="s1", name="To Do")
DOING = StatusModel(id="s2", name="In Progress")
DONE = StatusModel(id="s3", name="Done")
STATUSES = [TODO, DOING, DONE]


def _item(item_id, status=TODO, priority=None, level=None, **kwargs):
    prio = PriorityModel(id=f"p-{priority}", name=priority, level=level) if priority else None
    return WorkItemModel(id=item_id, identifier=f"T-{item_id}", title=f"Task {item_id}", status=status, priority=prio, **kwargs)


class Recorder:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __call__(self, task_id, status_id):
        self.calls.append((task_id, status_id))
        if self.fail:
            raise RuntimeError("backend down")


def test_every_status_gets_a_column_in_order():
    buckets = group_by_status([_item("1", DOING)], STATUSES)
    assert list(buckets) == ["s1", "s2", "s3"]
    assert buckets["s1"] == []
    assert [i.id for i in buckets["s2"]] == ["1"]


def test_each_item_lands_in_exactly_one_column():
    items = [_item("1", TODO), _item("2", DONE), _item("3", TODO), _item("4", DOING)]
    columns = build_columns(items, STATUSES)
    placed = [i.id for c in columns for i in c.items]
    assert sorted(placed) == ["1", "2", "3", "4"]
    assert {c.status.id: c.count for c in columns} == {"s1": 2, "s2": 1, "s3": 1}


def test_items_with_unknown_status_are_skipped():
    stray = StatusModel(id="gone", name="Archived")
    columns = build_columns([_item("1", stray), _item("2", TODO)], STATUSES)
    assert sum(c.count for c in columns) == 1


def test_sort_by_priority_orders_urgent_first():
    items = [
        _item("low", priority="Low"),
        _item("none"),
        _item("urgent", priority="Urgent"),
        _item("medium", priority="Medium"),
        _item("high", priority="High"),
        _item("unset", priority="None"),
    ]
    ordered = [i.id for i in sort_by_priority(items)]
    assert ordered == ["urgent", "high", "medium", "low", "unset", "none"]


def test_sort_by_priority_low_urgent_medium():
    items = [_item("low", priority="Low"), _item("urgent", priority="Urgent"), _item("medium", priority="Medium")]
    assert [i.id for i in sort_by_priority(items)] == ["urgent", "medium", "low"]


def test_sort_by_priority_is_idempotent():
    items = [
        _item("a", priority="Medium"),
        _item("b"),
        _item("c", priority="Urgent"),
        _item("d", priority="Medium"),
        _item("e", priority="Whatever", level=1),
        _item("f", priority="Low"),
    ]
    once = sort_by_priority(items)
    assert sort_by_priority(once) == once


def test_sort_by_priority_is_stable_for_equal_ranks():
    items = [_item("a", priority="High"), _item("b", priority="High"), _item("c", priority="High")]
    assert [i.id for i in sort_by_priority(items)] == ["a", "b", "c"]


def test_priority_level_overrides_name():
    items = [_item("named", priority="Urgent"), _item("leveled", priority="Whatever", level=-1)]
    assert [i.id for i in sort_by_priority(items)] == ["leveled", "named"]


def test_localized_priority_names_rank_like_english():
    items = [_item("low", priority="Низкий"), _item("crit", priority="Критический")]
    assert [i.id for i in sort_by_priority(items)] == ["crit", "low"]


def test_drop_on_other_column_submits_once():
    item = _item("1", TODO)
    columns = build_columns([item], STATUSES)
    submit = Recorder()
    assert on_drop(item, columns[2], submit) is True
    assert submit.calls == [("1", "s3")]


def test_drop_on_same_column_submits_nothing():
    item = _item("1", TODO)
    columns = build_columns([item], STATUSES)
    submit = Recorder()
    assert on_drop(item, columns[0], submit) is False
    assert submit.calls == []


def test_uncommitted_drop_submits_nothing():
    item = _item("1", TODO)
    columns = build_columns([item], STATUSES)
    submit = Recorder()
    assert on_drop(item, columns[1], submit, committed=False) is False
    assert submit.calls == []


def test_drop_errors_propagate():
    item = _item("1", TODO)
    columns = build_columns([item], STATUSES)
    with pytest.raises(RuntimeError):
        on_drop(item, columns[1], Recorder(fail=True))


def test_columns_are_rebuilt_from_snapshot_not_mutated_by_drop():
    item = _item("1", TODO)
    columns = build_columns([item], STATUSES)
    on_drop(item, columns[1], Recorder())
    assert item.status is TODO
    assert [i.id for i in columns[0].items] == ["1"]


def test_card_drag_states():
    item = _item("1", TODO)
    columns = build_columns([item], STATUSES)

    drag = CardDrag(item)
    assert drag.state is CardState.IDLE
    assert drag.begin() is CardState.DRAGGING
    with pytest.raises(ValueError):
        drag.begin()
    assert drag.drop(columns[1], Recorder()) is CardState.DROPPED_MOVED

    same = CardDrag(item)
    same.begin()
    assert same.drop(columns[0], Recorder()) is CardState.DROPPED_SAME_COLUMN

    released = CardDrag(item)
    released.begin()
    submit = Recorder()
    assert released.drop(columns[1], submit, committed=False) is CardState.CANCELLED
    assert submit.calls == []

    cancelled = CardDrag(item)
    cancelled.begin()
    assert cancelled.cancel() is CardState.CANCELLED
    with pytest.raises(ValueError):
        cancelled.drop(columns[1], Recorder())


def test_filter_items_by_project_assignee_priority():
    site = ProjectModel(id="p1", name="Site A")
    alice = UserModel(id="u1", name="Alice")
    items = [
        _item("1", priority="High", project=site, assignee=alice),
        _item("2", priority="Low", project=site),
        _item("3", priority="High"),
    ]
    assert [i.id for i in filter_items(items, project_ids=["p1"])] == ["1", "2"]
    assert [i.id for i in filter_items(items, assignees=["Alice"])] == ["1"]
    assert [i.id for i in filter_items(items, priorities=["high"])] == ["1", "3"]
    assert len(filter_items(items)) == 3


def test_filter_items_by_label():
    concrete = LabelModel(id="l1", name="concrete")
    roof = LabelModel(id="l2", name="roof")
    items = [
        _item("1", labels=[concrete]),
        _item("2", labels=[concrete, roof]),
        _item("3"),
    ]
    assert [i.id for i in filter_items(items, labels=["roof"])] == ["2"]
    assert [i.id for i in filter_items(items, labels=["concrete", "roof"])] == ["1", "2"]


def test_near_deadline_marks_open_items_due_soon():
    today = date(2025, 3, 10)
    items = [
        _item("due-tomorrow", TODO, due_date=date(2025, 3, 11)),
        _item("late", DOING, due_date=date(2025, 3, 1)),
        _item("later", TODO, due_date=date(2025, 3, 20)),
        _item("closed", DONE, due_date=date(2025, 3, 10)),
    ]
    assert near_deadline_ids(items, today) == {"due-tomorrow", "late"}


def test_board_context_totals():
    items = [_item("1", TODO), _item("2", DONE)]
    ctx = build_board_context(items, STATUSES, today=date(2025, 1, 1))
    assert ctx.total == 2
    assert ctx.column_for("s3").count == 1
    assert ctx.column_for("missing") is None
