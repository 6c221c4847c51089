"""Kanban board page.

Tasks are grouped into one column per workflow status and ordered by
priority. Moving a card, or changing its priority or assignee, submits a
single mutation; the board then re-reads the task snapshot, so what is shown
always reflects the backend.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import streamlit as st

from sitetrack_app.app import register_page
from sitetrack_app.core.config import PRIORITY_COLORS, PRIORITY_RANK, normalize_priority_name
from sitetrack_app.core.models import PriorityModel, UserModel, WorkItemModel
from sitetrack_app.core.status import status_label
from sitetrack_app.features.kanban import BoardContext, CardDrag, CardState, build_board_context, filter_items
from sitetrack_app.pages._shared import local_today, require_service
from sitetrack_app.visual.progress import ProgressReporter

logger = logging.getLogger(__name__)

NOBODY = ""


def _submit(item: WorkItemModel, what: str, call: Callable[[], Any]) -> bool:
    try:
        call()
    except Exception as exc:
        logger.warning("%s for %s failed: %s", what, item.identifier, exc)
        st.error(f"{what} failed for {item.identifier}: {exc}")
        return False
    return True


def _render_selectors(
    item: WorkItemModel,
    priorities: list[PriorityModel],
    users: list[UserModel],
    service,
) -> None:
    with st.expander("Edit", expanded=False):
        if priorities:
            options = [p.id for p in priorities]
            names = {p.id: p.name for p in priorities}
            current = item.priority.id if item.priority and item.priority.id in names else None
            chosen = st.selectbox(
                "Priority",
                options,
                index=options.index(current) if current else None,
                format_func=lambda pid: names[pid],
                key=f"prio_{item.id}",
            )
            if chosen and chosen != current and _submit(
                item, "Priority change", lambda: service.update_task_priority(item.id, chosen)
            ):
                st.toast(f"{item.identifier} set to {names[chosen]}")
                st.rerun()

        people = [NOBODY] + [u.id for u in users]
        names = {u.id: u.name for u in users}
        current = item.assignee.id if item.assignee and item.assignee.id in names else NOBODY
        chosen = st.selectbox(
            "Assignee",
            people,
            index=people.index(current),
            format_func=lambda uid: names.get(uid, "(Unassigned)"),
            key=f"assignee_{item.id}",
        )
        if chosen != current and _submit(
            item, "Assignment", lambda: service.update_task_assignee(item.id, chosen or None)
        ):
            st.toast(f"{item.identifier} assigned to {names.get(chosen, 'nobody')}")
            st.rerun()


def _render_card(
    item: WorkItemModel,
    ctx: BoardContext,
    service,
    priorities: list[PriorityModel],
    users: list[UserModel],
) -> None:
    priority = normalize_priority_name(item.priority.name if item.priority else None)
    color = PRIORITY_COLORS.get(priority, PRIORITY_COLORS["None"])
    with st.container(border=True):
        st.markdown(f"**{item.identifier}** · {item.title}")
        meta = [f":{'red' if priority == 'Urgent' else 'gray'}[{priority}]"]
        if item.assignee:
            meta.append(item.assignee.name)
        if item.due_date:
            due = item.due_date.strftime("%d %b")
            meta.append(f"⚠ {due}" if item.id in ctx.near_deadline else due)
        if item.labels:
            meta.append(", ".join(lbl.name for lbl in item.labels))
        st.caption(" · ".join(meta))
        st.markdown(
            f"<div style='height:3px;background:{color};border-radius:2px'></div>",
            unsafe_allow_html=True,
        )
        targets = [c.status.id for c in ctx.columns]
        names = {c.status.id: c.status.name for c in ctx.columns}
        target_id = st.selectbox(
            "Move to",
            targets,
            index=targets.index(item.status.id) if item.status.id in targets else 0,
            format_func=lambda sid: names[sid],
            key=f"move_{item.id}",
            label_visibility="collapsed",
        )
        if st.button("Move", key=f"move_btn_{item.id}", use_container_width=True):
            drag = CardDrag(item)
            drag.begin()
            try:
                outcome = drag.drop(ctx.column_for(target_id), service.update_task_status)
            except Exception as exc:
                logger.warning("Move for %s failed: %s", item.identifier, exc)
                st.error(f"Move failed for {item.identifier}: {exc}")
                return
            if outcome is CardState.DROPPED_MOVED:
                st.toast(f"{item.identifier} moved to {names[target_id]}")
                st.rerun()
        _render_selectors(item, priorities, users, service)


@register_page("Board")
def board_page():
    st.title("Board")
    st.caption("Tasks by status, most urgent first.")
    service = require_service()
    if service is None:
        return

    if st.button("Refresh", help="Pull the latest task snapshot from the deployment"):
        try:
            count = service.refresh_work_items()
        except Exception as exc:
            logger.warning("Live refresh failed: %s", exc)
            st.error(f"Refresh failed: {exc}")
        else:
            st.toast(f"Pulled {count} task(s).")

    reporter = ProgressReporter("Loading tasks")
    try:
        statuses = service.get_statuses()
        priorities = service.get_priorities()
        users = service.get_users()
        labels = service.get_labels()
        items = service.fetch_work_items(progress=reporter.callback)
        reporter.complete(f"Loaded {len(items)} task(s).")
    except Exception as exc:  # pragma: no cover
        reporter.error(f"Failed to load tasks: {exc}")
        raise

    with st.sidebar:
        st.subheader("Filters")
        projects = {i.project.id: i.project.name for i in items if i.project}
        chosen_projects = st.multiselect(
            "Projects", list(projects), format_func=lambda pid: projects[pid], key="board_projects"
        )
        people = sorted({i.assignee.name for i in items if i.assignee})
        chosen_people = st.multiselect("Assignees", people, key="board_assignees")
        chosen_priorities = st.multiselect(
            "Priorities", list(PRIORITY_RANK), key="board_priorities"
        )
        chosen_labels = st.multiselect(
            "Labels", sorted({lbl.name for lbl in labels}), key="board_labels"
        )

    visible = filter_items(
        items,
        project_ids=chosen_projects,
        assignees=chosen_people,
        priorities=chosen_priorities,
        labels=chosen_labels,
    )
    ctx = build_board_context(visible, statuses, today=local_today())
    st.caption(f"{ctx.total} task(s) on the board.")

    if not ctx.columns:
        st.info("No statuses configured.")
        return
    for column, slot in zip(ctx.columns, st.columns(len(ctx.columns))):
        with slot:
            st.markdown(f"**{status_label(column.status.name, column.status.icon_name)}** `{column.count}`")
            if not column.items:
                st.caption("No tasks")
            for item in column.items:
                _render_card(item, ctx, service, priorities, users)
