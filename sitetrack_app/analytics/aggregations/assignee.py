"""Assignee-based aggregations."""

from __future__ import annotations

from datetime import date

import pandas as pd

from sitetrack_app.core.config import UNASSIGNED_LABEL
from sitetrack_app.core.status import is_terminal_status


def aggregate_by_assignee(df: pd.DataFrame, today: date | None = None, limit: int = 200) -> pd.DataFrame:
    """Workload per assignee: open, done, overdue, and urgent/high open counts."""
    if df.empty:
        return df
    today = today or date.today()
    out = df.copy()
    out["assignee"] = out["assignee"].fillna(UNASSIGNED_LABEL).replace("", UNASSIGNED_LABEL)
    out["is_done"] = out["status"].apply(is_terminal_status)
    out["is_open"] = ~out["is_done"]
    due = pd.to_datetime(out["due_date"], errors="coerce") if "due_date" in out.columns else pd.NaT
    out["is_overdue"] = out["is_open"] & (due < pd.Timestamp(today))
    out["is_urgent_high"] = out["is_open"] & out["priority"].isin(["Urgent", "High"])
    agg = (
        out.groupby("assignee", dropna=False)
        .agg(
            tasks=("id", "count"),
            open=("is_open", "sum"),
            done=("is_done", "sum"),
            overdue=("is_overdue", "sum"),
            urgent_high=("is_urgent_high", "sum"),
        )
        .sort_values(by=["open", "overdue"], ascending=False)
        .head(limit)
    )
    return agg.astype(int).reset_index()
