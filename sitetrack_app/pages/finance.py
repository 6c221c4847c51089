"""Project finance page: cash flow, expenses by category, and budget variance."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from sitetrack_app.app import register_page
from sitetrack_app.core.config import CASH_FLOW_GROUPINGS, CASH_FLOW_PRESETS, SETTINGS
from sitetrack_app.features.finance import build_finance_context, project_comparison
from sitetrack_app.pages._shared import local_today, require_service, select_project
from sitetrack_app.visual.charts import budget_variance_chart, cash_flow_chart, category_chart
from sitetrack_app.visual.column_metadata import apply_column_metadata
from sitetrack_app.visual.progress import loading


def _money(value: float) -> str:
    return f"{value:,.0f} {SETTINGS.currency}"


@register_page("Finance")
def finance_page():
    st.title("Finance")
    service = require_service()
    if service is None:
        return
    project = select_project(service, key="finance_project")
    if project is None:
        return

    c1, c2 = st.columns(2)
    preset = c1.selectbox("Range", CASH_FLOW_PRESETS, index=CASH_FLOW_PRESETS.index("6m"))
    group_by = c2.selectbox("Group by", CASH_FLOW_GROUPINGS, index=CASH_FLOW_GROUPINGS.index("month"))

    with loading(f"Loading finance records for {project.name}", "Finance records loaded.") as reporter:
        reporter.update("Payments")
        payments = service.fetch_payments(project.id)
        reporter.update("Expenses")
        expenses = service.fetch_expenses(project.id)
        reporter.update("Budgets")
        budgets = service.fetch_budgets(project.id)

    ctx = build_finance_context(
        project,
        payments,
        expenses,
        budgets,
        preset=preset,
        group_by=group_by,
        today=local_today(),
    )
    for warning in ctx.warnings:
        st.warning(warning)

    summary = ctx.summary
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Received", _money(summary["cash_flow"]["total_incoming"]))
    m2.metric("Paid out", _money(summary["cash_flow"]["total_outgoing"]))
    m3.metric("Gross profit", _money(summary["profitability"]["gross_profit"]))
    m4.metric("Margin", f"{summary['profitability']['profit_margin']:.1f}%")
    if summary["budget"]:
        budget = summary["budget"]
        st.progress(min(max(budget["percent_used"] / 100, 0.0), 1.0))
        st.caption(
            f"{ctx.budget_name}: {_money(budget['spent'])} of {_money(budget['total'])} "
            f"({budget['percent_used']:.1f}% used, {_money(budget['remaining'])} left)"
        )

    tab_cash, tab_expenses, tab_budget, tab_projects = st.tabs(
        ["Cash flow", "Expenses", "Budget vs. actual", "All projects"]
    )
    with tab_cash:
        pending = ctx.payments
        st.caption(
            f"Pending: {_money(pending['pending_incoming'])} incoming, "
            f"{_money(pending['pending_outgoing'])} outgoing"
        )
        chart = cash_flow_chart(ctx.cash_flow)
        if chart is None:
            st.info("No confirmed payments in this range.")
        else:
            st.altair_chart(chart, use_container_width=True)
    with tab_expenses:
        chart = category_chart(ctx.categories)
        if chart is None:
            st.info("No paid or approved expenses yet.")
        else:
            st.altair_chart(chart, use_container_width=True)
            cols = ["category", "total", "count"]
            st.dataframe(ctx.categories[cols], hide_index=True, column_config=apply_column_metadata(cols))
    with tab_budget:
        if ctx.variance is None:
            st.info("Approve a budget to compare plan and actual spending.")
        else:
            lines = ctx.variance["lines"]
            chart = budget_variance_chart(lines)
            if chart is not None:
                st.altair_chart(chart, use_container_width=True)
            cols = list(lines.columns)
            st.dataframe(lines, hide_index=True, column_config=apply_column_metadata(cols))
            total = ctx.variance["summary"]
            st.caption(
                f"Planned {_money(total['total_planned'])}, actual {_money(total['total_actual'])}, "
                f"variance {total['variance_percent']:.1f}%"
            )
    with tab_projects:
        if st.button("Compare all projects"):
            projects = service.get_projects()
            pay = [service.fetch_payments(p.id) for p in projects]
            exp = [service.fetch_expenses(p.id) for p in projects]
            table = project_comparison(
                projects,
                pd.concat(pay, ignore_index=True) if pay else pd.DataFrame(),
                pd.concat(exp, ignore_index=True) if exp else pd.DataFrame(),
            )
            st.dataframe(table, hide_index=True, column_config=apply_column_metadata(table.columns))
            st.download_button(
                "Download CSV",
                data=table.to_csv(index=False).encode(SETTINGS.download_encoding),
                file_name="project_comparison.csv",
                mime="text/csv",
            )
