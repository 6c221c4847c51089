"""Project timeline page: Gantt bars, zoom, and drag-to-reschedule preview."""

from __future__ import annotations

import streamlit as st

from sitetrack_app.analytics.metrics.progress import plan_fact_series
from sitetrack_app.app import register_page
from sitetrack_app.core.config import DEFAULT_CELL_WIDTH, VIEW_MODES, ZOOM_LABELS
from sitetrack_app.features.gantt import (
    DragConstraints,
    apply,
    build_timeline_context,
    end_drag,
    start_drag,
    zoom_in,
    zoom_out,
)
from sitetrack_app.features.gantt.timeline import SelectTask, SetCellWidth, SetViewMode, ToggleWeekends
from sitetrack_app.pages._shared import local_today, require_service, select_project
from sitetrack_app.visual.charts import gantt_chart, plan_fact_chart
from sitetrack_app.visual.progress import ProgressReporter

STATE_KEY = "timeline_state"
SOURCE_KEY = "timeline_source"
CONSTRAINTS_KEY = "timeline_constraints"


@register_page("Timeline")
def timeline_page():
    st.title("Timeline")
    st.caption("Schedule of project tasks. Dragging a bar previews a new schedule locally.")
    service = require_service()
    if service is None:
        return
    project = select_project(service, key="timeline_project")
    if project is None:
        return
    today = local_today()

    c1, c2 = st.columns(2)
    custom_start = c1.date_input("Custom start", value=None, key="timeline_start")
    custom_end = c2.date_input(
        "Custom end",
        value=None,
        min_value=custom_start,
        key="timeline_end",
    )

    reporter = ProgressReporter(f"Loading schedule for {project.name}")
    try:
        tasks = service.fetch_scheduled_tasks(project.id, today=today)
        reporter.complete(f"Loaded {len(tasks)} task(s).")
    except Exception as exc:  # pragma: no cover
        reporter.error(f"Failed to load schedule: {exc}")
        raise

    source = (project.id, custom_start, custom_end, tuple((t.id, t.start, t.end) for t in tasks))
    state = st.session_state.get(STATE_KEY)
    if state is None or st.session_state.get(SOURCE_KEY) != source:
        ctx = build_timeline_context(
            tasks,
            project,
            custom_start=custom_start,
            custom_end=custom_end,
            cell_width=st.session_state.get("timeline_cell_width", DEFAULT_CELL_WIDTH),
            today=today,
        )
        state = ctx.state
        st.session_state[SOURCE_KEY] = source
        # bounds are taken once per mount
        st.session_state[CONSTRAINTS_KEY] = DragConstraints(width=ctx.width)

    z1, z2, z3, z4, z5 = st.columns([1, 1, 1, 2, 2])
    if z1.button("−", help="Zoom out"):
        state = apply(state, SetCellWidth(zoom_out(state.cell_width)))
    if z2.button("100%", help="Reset zoom"):
        state = apply(state, SetCellWidth(DEFAULT_CELL_WIDTH))
    if z3.button("+", help="Zoom in"):
        state = apply(state, SetCellWidth(zoom_in(state.cell_width)))
    z4.caption(f"Zoom {ZOOM_LABELS.get(state.cell_width, str(state.cell_width))}")
    view_mode = z5.selectbox("View", VIEW_MODES, index=VIEW_MODES.index(state.view_mode))
    if view_mode != state.view_mode:
        state = apply(state, SetViewMode(view_mode))
    if st.checkbox("Shade weekends", value=state.show_weekends) != state.show_weekends:
        state = apply(state, ToggleWeekends())
    st.session_state["timeline_cell_width"] = state.cell_width

    if state.tasks:
        with st.expander("Reschedule (preview)"):
            names = {t.id: t.name for t in state.tasks}
            task_id = st.selectbox("Task", list(names), format_func=lambda tid: names[tid])
            shift = st.number_input("Shift by days", value=0, step=1)
            constrain = st.checkbox("Keep inside the timeline", value=True)
            b1, b2 = st.columns(2)
            if b1.button("Apply shift", type="primary"):
                state = apply(state, SelectTask(task_id))
                state, session = start_drag(state, task_id)
                constraints = st.session_state.get(CONSTRAINTS_KEY) if constrain else None
                state = end_drag(state, session, shift * state.cell_width, constraints)
            if b2.button("Discard preview"):
                st.session_state.pop(STATE_KEY, None)
                st.session_state.pop(SOURCE_KEY, None)
                st.rerun()

    st.session_state[STATE_KEY] = state
    ctx = build_timeline_context(state.tasks, project, today=today, state=state)
    chart = gantt_chart(ctx, today=today)
    if chart is None:
        st.info("No tasks scheduled for this project.")
    else:
        st.altair_chart(chart, use_container_width=False)
    st.caption(f"{state.start_date:%d %b %Y} – {state.end_date:%d %b %Y}")

    st.markdown("---")
    st.subheader("Plan vs. fact")
    frame = service.fetch_work_items_frame(project.id)
    series = plan_fact_series(frame, state.start_date, state.end_date, today=today)
    pf_chart = plan_fact_chart(series)
    if pf_chart is None:
        st.info("No progress data for this window.")
    else:
        st.altair_chart(pf_chart, use_container_width=True)
