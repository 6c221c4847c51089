"""Overdue tasks page.

Fetches all tasks and lists the open ones past their due date, plus the
ones due within the next few days.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st

from sitetrack_app.app import register_page
from sitetrack_app.core.config import DEFAULT_DUE_SOON_DAYS, SETTINGS
from sitetrack_app.core.overdue import compute_overdue, due_soon
from sitetrack_app.pages._shared import app_base_url, local_today, require_service
from sitetrack_app.visual.progress import ProgressReporter
from sitetrack_app.visual.tables import prepare_task_table


@register_page("Overdue Tasks")
def overdue_page():
    st.title("Overdue Tasks")
    st.caption("Open tasks past their due date.")
    service = require_service()
    if service is None:
        return
    within = st.number_input(
        "Also list tasks due within N days",
        min_value=0,
        value=DEFAULT_DUE_SOON_DAYS,
        step=1,
    )

    if st.button("Fetch Overdue", type="primary"):
        reporter = ProgressReporter("Fetching tasks")
        try:
            base = service.fetch_work_items_frame(progress=reporter.callback)
            if base.empty:
                reporter.complete("No tasks found.")
                st.info("No tasks found.")
                return
            reporter.update("Checking due dates")
            st.session_state["overdue_base"] = base
            reporter.complete(f"Checked {len(base)} task(s).")
        except Exception as exc:  # pragma: no cover
            reporter.error(f"Failed to fetch tasks: {exc}")
            raise

    base = st.session_state.get("overdue_base", pd.DataFrame())
    if base.empty:
        st.info("No tasks checked yet.")
        return
    today = local_today()
    base_url = app_base_url()

    overdue_df = compute_overdue(base, today)
    st.markdown("---")
    st.subheader(f"Overdue ({len(overdue_df)})")
    if overdue_df.empty:
        st.success("Nothing is overdue.")
    else:
        prepared, display_cols, cfg = prepare_task_table(overdue_df, base_url)
        st.dataframe(prepared[display_cols].head(SETTINGS.max_table_rows), hide_index=True, column_config=cfg)
        st.download_button(
            "Download Overdue CSV",
            data=prepared[display_cols].to_csv(index=False).encode(SETTINGS.download_encoding),
            file_name="overdue_tasks.csv",
            mime="text/csv",
        )

    soon_df = due_soon(base, today, within_days=int(within))
    st.subheader(f"Due soon ({len(soon_df)})")
    if soon_df.empty:
        st.caption("No open tasks due in this window.")
    else:
        prepared, display_cols, cfg = prepare_task_table(soon_df, base_url, extra_columns=["days_until_due"])
        st.dataframe(prepared[display_cols].head(SETTINGS.max_table_rows), hide_index=True, column_config=cfg)
