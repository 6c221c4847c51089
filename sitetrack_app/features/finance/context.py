"""Pure helpers to build the finance view context for testing (no Streamlit)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

import pandas as pd

from sitetrack_app.core.models import ProjectModel
from sitetrack_app.features.finance.reports import (
    budget_variance,
    cash_flow,
    category_rollup,
    expense_statistics,
    financial_summary,
    latest_approved_budget,
    payment_statistics,
    preset_range,
)


@dataclass(slots=True)
class FinanceContext:
    summary: dict[str, Any]
    payments: dict[str, Any]
    expenses: dict[str, Any]
    categories: pd.DataFrame
    cash_flow: pd.DataFrame
    variance: dict[str, Any] | None = None
    budget_name: str | None = None
    range: tuple[date, date] | None = None
    warnings: list[str] = field(default_factory=list)


def build_finance_context(
    project: ProjectModel,
    payments: pd.DataFrame,
    expenses: pd.DataFrame,
    budgets: pd.DataFrame,
    *,
    preset: str = "6m",
    group_by: str = "month",
    today: date | None = None,
) -> FinanceContext:
    budget = latest_approved_budget(budgets)
    window = preset_range(preset, today)
    warnings = []
    variance = None
    if budget is None:
        warnings.append("No approved budget for this project.")
    else:
        variance = budget_variance(budget["lines"] or [], expenses)
    spent = expenses[expenses["status"].isin(("paid", "approved"))] if not expenses.empty else expenses
    return FinanceContext(
        summary=financial_summary(project, payments, expenses, budget),
        payments=payment_statistics(payments),
        expenses=expense_statistics(expenses),
        categories=category_rollup(spent),
        cash_flow=cash_flow(payments, group_by, *window),
        variance=variance,
        budget_name=None if budget is None else budget["name"],
        range=window,
        warnings=warnings,
    )
