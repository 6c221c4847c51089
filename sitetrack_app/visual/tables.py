"""Reusable table helpers for Streamlit rendering."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from sitetrack_app.core.column_config import get_columns
from sitetrack_app.visual.column_metadata import apply_column_metadata


def add_task_link(df: pd.DataFrame, base_url: str, id_col: str = "identifier", label: str = "Task"):
    if df.empty or id_col not in df.columns:
        return df, {}
    out = df.copy()
    base = base_url.rstrip("/")
    out[label] = out[id_col].astype(str).apply(lambda k: f"{base}/tasks/{k}" if k and k != "nan" else "")
    cfg = {
        label: st.column_config.LinkColumn(
            label,
            display_text=r"tasks/(.*)$",
            help="Open the task in the web app",
            width="small",
        )
    }
    return out, cfg


def prepare_task_table(
    df: pd.DataFrame,
    base_url: str,
    *,
    extra_columns: list[str] | None = None,
) -> tuple[pd.DataFrame, list[str], dict[str, object]]:
    if df.empty:
        return df, [], {}

    table, cfg = add_task_link(df, base_url)
    canonical = get_columns("task_list") or []
    display_cols: list[str] = [col for col in canonical if col in table.columns]

    if extra_columns:
        for col in extra_columns:
            if col in table.columns and col not in display_cols:
                display_cols.append(col)

    if "Task" in table.columns and "Task" not in display_cols:
        display_cols.insert(0, "Task")

    if not display_cols:
        display_cols = [col for col in table.columns if col not in ("id", "identifier")]

    return table, display_cols, apply_column_metadata(display_cols, cfg)
