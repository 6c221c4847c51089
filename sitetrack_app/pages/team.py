"""Team workload page: open, closed, and overdue tasks per assignee."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from sitetrack_app.analytics.aggregations.assignee import aggregate_by_assignee
from sitetrack_app.app import register_page
from sitetrack_app.core.config import DEFAULT_TOP_N, SETTINGS
from sitetrack_app.pages._shared import local_today, require_service
from sitetrack_app.visual.charts import workload_chart
from sitetrack_app.visual.column_metadata import apply_column_metadata
from sitetrack_app.visual.progress import ProgressReporter


@register_page("Team Workload")
def team_page():
    st.title("Team Workload")
    st.caption("How tasks are spread across the team.")
    service = require_service()
    if service is None:
        return
    top_n = st.number_input("Show top N assignees", min_value=1, value=DEFAULT_TOP_N, step=1)

    if st.button("Fetch Workload", type="primary"):
        reporter = ProgressReporter("Fetching tasks")
        try:
            df = service.fetch_work_items_frame(progress=reporter.callback)
            st.session_state["team_df"] = df
            reporter.complete(f"Loaded {len(df)} task(s).")
        except Exception as exc:  # pragma: no cover
            reporter.error(f"Failed to fetch tasks: {exc}")
            raise

    df = st.session_state.get("team_df", pd.DataFrame())
    if df.empty:
        st.info("No tasks loaded yet.")
        return
    agg = aggregate_by_assignee(df, today=local_today(), limit=int(top_n))
    chart = workload_chart(agg)
    if chart is not None:
        st.altair_chart(chart, use_container_width=True)
    cols = list(agg.columns)
    st.dataframe(agg, hide_index=True, column_config=apply_column_metadata(cols))
    st.download_button(
        "Download Workload CSV",
        data=agg.to_csv(index=False).encode(SETTINGS.download_encoding),
        file_name="team_workload.csv",
        mime="text/csv",
    )
