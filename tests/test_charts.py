from datetime import date

import pandas as pd

from sitetrack_app.core.models import ScheduledTask
from sitetrack_app.features.gantt import build_timeline_context
from sitetrack_app.visual.charts import (
    budget_variance_chart,
    cash_flow_chart,
    category_chart,
    gantt_chart,
    plan_fact_chart,
    workload_chart,
)


def _sample_tasks():
    return [
        ScheduledTask(id="a", name="Excavation", start=date(2025, 1, 2), end=date(2025, 1, 9), group="Site", progress=0.5),
        ScheduledTask(id="b", name="Formwork", start=date(2025, 1, 6), end=date(2025, 1, 14), group="Site"),
        ScheduledTask(id="c", name="Permits", start=date(2025, 1, 1), end=date(2025, 1, 3)),
    ]


def test_gantt_chart_builds_layers():
    ctx = build_timeline_context(_sample_tasks(), today=date(2025, 1, 5))
    chart = gantt_chart(ctx, today=date(2025, 1, 5))
    assert chart is not None
    rendered = chart.to_dict()
    assert rendered["width"] == ctx.width
    assert len(rendered["layer"]) >= 4


def test_gantt_chart_empty():
    ctx = build_timeline_context([], today=date(2025, 1, 5))
    assert gantt_chart(ctx) is None


def test_finance_charts():
    flow = pd.DataFrame(
        {
            "period": [date(2025, 1, 1), date(2025, 2, 1)],
            "incoming": [100.0, 0.0],
            "outgoing": [40.0, 10.0],
            "net": [60.0, -10.0],
            "cumulative": [60.0, 50.0],
        }
    )
    assert cash_flow_chart(flow) is not None
    assert cash_flow_chart(flow.iloc[0:0]) is None

    rollup = pd.DataFrame({"category": ["labor", "materials"], "total": [300.0, 150.0], "count": [1, 2]})
    assert category_chart(rollup) is not None

    lines = pd.DataFrame(
        {
            "category": ["labor"],
            "planned": [250.0],
            "actual": [300.0],
            "variance": [-50.0],
            "variance_percent": [-20.0],
            "status": ["overbudget"],
        }
    )
    assert budget_variance_chart(lines) is not None


def test_progress_and_workload_charts():
    series = pd.DataFrame(
        {"date": [date(2025, 1, 1), date(2025, 1, 2)], "planned": [2, 3], "completed": [0, 1], "todo": [2, 2]}
    )
    assert plan_fact_chart(series) is not None
    agg = pd.DataFrame({"assignee": ["Alice"], "open": [2], "done": [1]})
    assert workload_chart(agg) is not None
    assert workload_chart(pd.DataFrame()) is None
