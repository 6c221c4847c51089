"""Finance feature module: payments, expenses, budget variance, and cash flow."""

from sitetrack_app.features.finance.context import FinanceContext, build_finance_context
from sitetrack_app.features.finance.reports import (
    budget_variance,
    cash_flow,
    category_rollup,
    expense_statistics,
    financial_summary,
    latest_approved_budget,
    payment_statistics,
    preset_range,
    project_comparison,
)

__all__ = [
    "FinanceContext",
    "budget_variance",
    "build_finance_context",
    "cash_flow",
    "category_rollup",
    "expense_statistics",
    "financial_summary",
    "latest_approved_budget",
    "payment_statistics",
    "preset_range",
    "project_comparison",
]
