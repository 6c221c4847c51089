"""Chart builders (Altair) for the timeline, finance, and workload views."""

from __future__ import annotations

from datetime import date, timedelta

import altair as alt
import pandas as pd

from sitetrack_app.core.config import PRIORITY_COLORS
from sitetrack_app.features.gantt.context import TimelineContext
from sitetrack_app.features.gantt.timeline import date_to_x

INCOMING_COLOR = "#10B981"
OUTGOING_COLOR = "#EF4444"
NET_COLOR = "#3B82F6"


def _day_labels(ctx: TimelineContext) -> pd.DataFrame:
    # label every day when cells are wide, else every Monday
    step_all = ctx.state.cell_width >= 60
    records = []
    for day in ctx.days:
        if step_all or day.weekday() == 0 or day == ctx.state.start_date:
            records.append(
                {
                    "x": date_to_x(ctx.state, day) + ctx.state.cell_width / 2,
                    "label": day.strftime("%d %b"),
                }
            )
    return pd.DataFrame.from_records(records, columns=["x", "label"])


def gantt_chart(ctx: TimelineContext, today: date | None = None):
    """Layered Gantt chart positioned in timeline pixels."""
    if ctx.bars.empty:
        return None
    state = ctx.state
    rows = int(max(ctx.bars["row"].max(), ctx.headers["row"].max() if not ctx.headers.empty else 0)) + 1
    x_scale = alt.Scale(domain=[0, ctx.width], nice=False, zero=False)
    y_enc = alt.Y("row:O", axis=None, scale=alt.Scale(domain=list(range(rows))))

    layers = []
    if state.show_weekends:
        weekend = pd.DataFrame(
            [
                {"x": date_to_x(state, d), "x_end": date_to_x(state, d + timedelta(days=1))}
                for d in ctx.days
                if d.weekday() >= 5
            ],
            columns=["x", "x_end"],
        )
        if not weekend.empty:
            layers.append(
                alt.Chart(weekend)
                .mark_rect(color="#f3f4f6")
                .encode(x=alt.X("x:Q", scale=x_scale, axis=None), x2="x_end:Q")
            )

    bars = ctx.bars.drop(columns=["start", "end"]).assign(
        start_label=ctx.bars["start"].astype(str),
        end_label=ctx.bars["end"].astype(str),
        color=ctx.bars["color"].fillna(NET_COLOR),
        progress_end=ctx.bars["x"] + ctx.bars["width"] * ctx.bars["progress"].fillna(0).astype(float),
        stroke=ctx.bars["selected"].map({True: "#111827", False: "transparent"}),
    )
    layers.append(
        alt.Chart(bars)
        .mark_bar(cornerRadius=4, opacity=0.55, height=max(state.row_height // 3, 8))
        .encode(
            x=alt.X("x:Q", scale=x_scale, axis=None),
            x2="x_end:Q",
            y=y_enc,
            color=alt.Color("color:N", scale=None),
            stroke=alt.Stroke("stroke:N", scale=None),
            tooltip=[
                alt.Tooltip("name:N", title="Task"),
                alt.Tooltip("start_label:N", title="Start"),
                alt.Tooltip("end_label:N", title="End"),
                alt.Tooltip("duration_days:Q", title="Days"),
                alt.Tooltip("assignee:N", title="Assignee"),
            ],
        )
    )
    layers.append(
        alt.Chart(bars)
        .mark_bar(cornerRadius=4, height=max(state.row_height // 3, 8))
        .encode(x="x:Q", x2="progress_end:Q", y=y_enc, color=alt.Color("color:N", scale=None))
    )
    layers.append(
        alt.Chart(bars)
        .mark_text(align="left", dx=4, dy=-state.row_height // 4, fontSize=11)
        .encode(x="x:Q", y=y_enc, text="name:N")
    )
    if not ctx.headers.empty:
        layers.append(
            alt.Chart(ctx.headers.assign(x=0.0))
            .mark_text(align="left", fontWeight="bold", fontSize=12, color="#374151")
            .encode(x="x:Q", y=y_enc, text="group:N")
        )
    labels = _day_labels(ctx)
    if not labels.empty:
        layers.append(
            alt.Chart(labels)
            .mark_text(fontSize=10, color="#6B7280", baseline="top")
            .encode(x="x:Q", y=alt.value(0), text="label:N")
        )
    if today is not None and state.start_date <= today <= state.end_date:
        layers.append(
            alt.Chart(pd.DataFrame({"x": [date_to_x(state, today)]}))
            .mark_rule(color=OUTGOING_COLOR, strokeDash=[4, 3])
            .encode(x="x:Q")
        )
    return alt.layer(*layers).properties(width=ctx.width, height=rows * state.row_height)


def cash_flow_chart(df: pd.DataFrame):
    if df.empty:
        return None
    data = df.assign(period=pd.to_datetime(df["period"]))
    data = data.assign(label=data["period"].dt.strftime("%Y-%m-%d"))
    long = data.melt(id_vars=["label"], value_vars=["incoming", "outgoing"], var_name="direction")
    bars = (
        alt.Chart(long)
        .mark_bar(opacity=0.8)
        .encode(
            x=alt.X("label:O", title="Period"),
            xOffset="direction:N",
            y=alt.Y("value:Q", title="Amount"),
            color=alt.Color(
                "direction:N",
                scale=alt.Scale(domain=["incoming", "outgoing"], range=[INCOMING_COLOR, OUTGOING_COLOR]),
                title="Direction",
            ),
            tooltip=[
                alt.Tooltip("label:O", title="Period"),
                alt.Tooltip("direction:N", title="Direction"),
                alt.Tooltip("value:Q", title="Amount", format=",.0f"),
            ],
        )
    )
    line = (
        alt.Chart(data)
        .mark_line(color=NET_COLOR, point=True)
        .encode(
            x="label:O",
            y=alt.Y("cumulative:Q", title="Cumulative net"),
            tooltip=[
                alt.Tooltip("label:O", title="Period"),
                alt.Tooltip("net:Q", title="Net", format=",.0f"),
                alt.Tooltip("cumulative:Q", title="Cumulative", format=",.0f"),
            ],
        )
    )
    return alt.layer(bars, line).resolve_scale(y="independent").properties(height=300)


def category_chart(rollup: pd.DataFrame):
    if rollup.empty:
        return None
    return (
        alt.Chart(rollup)
        .mark_bar()
        .encode(
            x=alt.X("total:Q", title="Spent"),
            y=alt.Y("category:N", sort="-x", title=None),
            tooltip=[
                alt.Tooltip("category:N", title="Category"),
                alt.Tooltip("total:Q", title="Total", format=",.0f"),
                alt.Tooltip("count:Q", title="Expenses"),
            ],
        )
        .properties(height=max(len(rollup) * 28, 120))
    )


def budget_variance_chart(lines: pd.DataFrame):
    if lines.empty:
        return None
    long = lines.melt(
        id_vars=["category", "status"],
        value_vars=["planned", "actual"],
        var_name="kind",
        value_name="amount",
    )
    return (
        alt.Chart(long)
        .mark_bar()
        .encode(
            y=alt.Y("category:N", title=None),
            yOffset="kind:N",
            x=alt.X("amount:Q", title="Amount"),
            color=alt.Color(
                "kind:N",
                scale=alt.Scale(domain=["planned", "actual"], range=["#9CA3AF", NET_COLOR]),
                title=None,
            ),
            tooltip=["category:N", "kind:N", alt.Tooltip("amount:Q", format=",.0f"), "status:N"],
        )
        .properties(height=max(len(lines) * 40, 120))
    )


def plan_fact_chart(series: pd.DataFrame):
    if series.empty:
        return None
    long = series.assign(date=pd.to_datetime(series["date"])).melt(
        id_vars=["date"], value_vars=["planned", "completed", "todo"], var_name="series", value_name="tasks"
    )
    return (
        alt.Chart(long)
        .mark_line(point=True)
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("tasks:Q", title="Tasks"),
            color=alt.Color(
                "series:N",
                scale=alt.Scale(
                    domain=["planned", "completed", "todo"],
                    range=[NET_COLOR, INCOMING_COLOR, PRIORITY_COLORS["High"]],
                ),
                title=None,
            ),
            tooltip=[alt.Tooltip("date:T", title="Date"), "series:N", "tasks:Q"],
        )
        .properties(height=260)
    )


def workload_chart(agg: pd.DataFrame):
    if agg.empty:
        return None
    long = agg.melt(id_vars=["assignee"], value_vars=["open", "done"], var_name="state", value_name="tasks")
    return (
        alt.Chart(long)
        .mark_bar()
        .encode(
            y=alt.Y("assignee:N", sort="-x", title=None),
            x=alt.X("tasks:Q", stack="zero", title="Tasks"),
            color=alt.Color(
                "state:N",
                scale=alt.Scale(domain=["open", "done"], range=[NET_COLOR, INCOMING_COLOR]),
                title=None,
            ),
            tooltip=["assignee:N", "state:N", "tasks:Q"],
        )
        .properties(height=max(len(agg) * 26, 120))
    )
