"""Overdue and due-soon task helpers."""

from __future__ import annotations

from datetime import date

import pandas as pd

from .config import DEFAULT_DUE_SOON_DAYS
from .status import is_terminal_status


def _open_with_due(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty or "due_date" not in df.columns:
        return pd.DataFrame()
    out = df.copy()
    out["due_dt"] = pd.to_datetime(out["due_date"], errors="coerce")
    out = out[out["due_dt"].notna()]
    if "status" in out.columns:
        out = out[~out["status"].apply(is_terminal_status)]
    return out


def compute_overdue(df: pd.DataFrame, today: date) -> pd.DataFrame:
    out = _open_with_due(df)
    if out.empty:
        return pd.DataFrame()
    out["days_overdue"] = (pd.Timestamp(today) - out["due_dt"]).dt.days
    out = out[out["days_overdue"] > 0]
    return out.drop(columns=["due_dt"]).sort_values(by="days_overdue", ascending=False)


def due_soon(df: pd.DataFrame, today: date, within_days: int = DEFAULT_DUE_SOON_DAYS) -> pd.DataFrame:
    out = _open_with_due(df)
    if out.empty:
        return pd.DataFrame()
    out["days_until_due"] = (out["due_dt"] - pd.Timestamp(today)).dt.days
    out = out[(out["days_until_due"] >= 0) & (out["days_until_due"] <= within_days)]
    return out.drop(columns=["due_dt"]).sort_values(by="days_until_due")
