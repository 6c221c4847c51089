"""Plan vs. fact progress series for a project window (pure functions)."""

from __future__ import annotations

from datetime import date, timedelta

import pandas as pd
import pytz

from sitetrack_app.core.config import TIMEZONE
from sitetrack_app.core.status import is_terminal_status

SERIES_COLUMNS = ["date", "planned", "completed", "todo"]


def sampling_interval(start: date, end: date) -> int:
    """Days between samples: weekly past 60 days, every 3 days past 30, else daily."""
    span = max((end - start).days, 1)
    if span > 60:
        return 7
    if span > 30:
        return 3
    return 1


def _day_end(day: date, tz) -> pd.Timestamp:
    return pd.Timestamp(day + timedelta(days=1), tz=tz) - pd.Timedelta(microseconds=1)


def plan_fact_series(
    df: pd.DataFrame,
    start: date,
    end: date,
    today: date | None = None,
) -> pd.DataFrame:
    """Count tasks planned and completed by the end of each sampled day.

    A task without a creation time counts as planned from the first day.
    A closed task without a completion time counts as completed on every
    sampled day up to ``today``. When ``today`` falls inside the window but
    is not sampled, a final point for today is appended.
    """
    tz = pytz.timezone(TIMEZONE)
    today = today or date.today()
    if end < start:
        return pd.DataFrame(columns=SERIES_COLUMNS)

    step = sampling_interval(start, end)
    days = [start + timedelta(days=i) for i in range(0, (end - start).days + 1, step)]

    if df.empty:
        created = pd.Series(dtype="datetime64[ns, UTC]")
        completed = pd.Series(dtype="datetime64[ns, UTC]")
        closed = pd.Series(dtype=bool)
    else:
        missing = pd.Series(pd.NaT, index=df.index)
        created = pd.to_datetime(df.get("created", missing), utc=True, errors="coerce")
        completed = pd.to_datetime(df.get("completed_at", missing), utc=True, errors="coerce")
        closed = df["status"].apply(is_terminal_status) if "status" in df.columns else completed.notna()

    def _point(day: date) -> dict:
        cutoff = _day_end(day, tz)
        planned = int((created.isna() | (created <= cutoff)).sum())
        done = int((closed & completed.notna() & (completed <= cutoff)).sum())
        if day <= today:
            done += int((closed & completed.isna()).sum())
        return {"date": day, "planned": planned, "completed": done, "todo": planned - done}

    points = [_point(day) for day in days]
    if days and start <= today <= end and today not in days:
        points.append(_point(today))
    return pd.DataFrame.from_records(points, columns=SERIES_COLUMNS)
