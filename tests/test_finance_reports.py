from datetime import date

import pandas as pd
import pytest

from sitetrack_app.core.mappers import (
    budgets_to_dataframe,
    expenses_to_dataframe,
    map_budget,
    map_expense,
    map_payment,
    payments_to_dataframe,
)
from sitetrack_app.core.models import ProjectModel
from sitetrack_app.features.finance import (
    budget_variance,
    build_finance_context,
    cash_flow,
    category_rollup,
    expense_statistics,
    financial_summary,
    latest_approved_budget,
    payment_statistics,
    preset_range,
    project_comparison,
)

PROJECT = ProjectModel(id="p1", name="Tower A", client="ACME", contract_value=1000.0)


def _sample_payments():
    raw = [
        {"_id": "1", "projectId": "p1", "type": "incoming", "amount": 500, "status": "confirmed", "paymentDate": "2025-01-05"},
        {"_id": "2", "projectId": "p1", "type": "outgoing", "amount": 200, "status": "confirmed", "paymentDate": "2025-01-20"},
        {"_id": "3", "projectId": "p1", "type": "incoming", "amount": 300, "status": "confirmed", "paymentDate": "2025-03-02"},
        {"_id": "4", "projectId": "p1", "type": "incoming", "amount": 999, "status": "pending", "paymentDate": "2025-03-03"},
        {"_id": "5", "projectId": "p1", "type": "outgoing", "amount": 50, "status": "pending", "paymentDate": "2025-03-04"},
    ]
    return payments_to_dataframe(map_payment(r) for r in raw)


def _sample_expenses():
    raw = [
        {"_id": "e1", "projectId": "p1", "category": "materials", "amount": 100, "status": "paid", "expenseDate": "2025-01-10"},
        {"_id": "e2", "projectId": "p1", "category": "materials", "amount": 50, "status": "approved", "expenseDate": "2025-01-11"},
        {"_id": "e3", "projectId": "p1", "category": "labor", "amount": 300, "status": "paid", "expenseDate": "2025-01-12"},
        {"_id": "e4", "projectId": "p1", "category": "labor", "amount": 70, "status": "pending", "expenseDate": "2025-01-13"},
        {"_id": "e5", "projectId": "p1", "category": "permits", "amount": 20, "status": "rejected", "expenseDate": "2025-01-14"},
    ]
    return expenses_to_dataframe(map_expense(r) for r in raw)


def _sample_budgets():
    raw = [
        {
            "_id": "b1",
            "projectId": "p1",
            "name": "Initial",
            "totalBudget": 400,
            "status": "approved",
            "effectiveDate": "2024-12-01",
            "lines": [{"category": "materials", "plannedAmount": 200}],
        },
        {
            "_id": "b2",
            "projectId": "p1",
            "name": "Revised",
            "totalBudget": 600,
            "status": "approved",
            "effectiveDate": "2025-02-01",
            "lines": [
                {"category": "materials", "plannedAmount": 200},
                {"category": "labor", "plannedAmount": 250},
                {"category": "equipment", "plannedAmount": 0},
                {"category": "transport", "plannedAmount": 100},
            ],
        },
        {"_id": "b3", "projectId": "p1", "name": "Draft", "totalBudget": 900, "status": "draft", "effectiveDate": "2025-05-01"},
    ]
    return budgets_to_dataframe(map_budget(r) for r in raw)


def test_payment_statistics():
    stats = payment_statistics(_sample_payments())
    assert stats["total_incoming"] == 800
    assert stats["total_outgoing"] == 200
    assert stats["pending_incoming"] == 999
    assert stats["pending_outgoing"] == 50
    assert stats["net_cash_flow"] == 600
    assert stats["payment_count"] == 5
    assert stats["pending_count"] == 2


def test_payment_statistics_empty():
    stats = payment_statistics(payments_to_dataframe([]))
    assert stats["net_cash_flow"] == 0
    assert stats["payment_count"] == 0


def test_expense_statistics_breakdown_counts_paid_and_approved():
    stats = expense_statistics(_sample_expenses())
    assert stats["total_paid"] == 400
    assert stats["total_approved"] == 50
    assert stats["total_pending"] == 70
    assert stats["expense_count"] == 5
    assert stats["by_category"] == {"labor": 300.0, "materials": 150.0}


def test_category_rollup_sorted_by_total():
    rollup = category_rollup(_sample_expenses())
    assert list(rollup["category"]) == ["labor", "materials", "permits"]
    assert list(rollup["total"]) == [370, 150, 20]
    assert list(rollup["count"]) == [2, 2, 1]


def test_latest_approved_budget_picks_newest_effective_date():
    budget = latest_approved_budget(_sample_budgets())
    assert budget["name"] == "Revised"
    assert latest_approved_budget(budgets_to_dataframe([])) is None


def test_budget_variance_lines_and_status():
    budget = latest_approved_budget(_sample_budgets())
    result = budget_variance(budget["lines"], _sample_expenses())
    lines = result["lines"].set_index("category")

    assert lines.loc["materials", "actual"] == 150
    assert lines.loc["materials", "variance"] == 50
    assert lines.loc["materials", "variance_percent"] == pytest.approx(25.0)
    assert lines.loc["materials", "status"] == "ontrack"

    # 300 spent on 250 planned is 20% over
    assert lines.loc["labor", "variance_percent"] == pytest.approx(-20.0)
    assert lines.loc["labor", "status"] == "overbudget"

    # nothing planned means no percentage
    assert lines.loc["equipment", "variance_percent"] == 0
    assert lines.loc["equipment", "status"] == "ontrack"

    summary = result["summary"]
    assert summary["total_planned"] == 550
    assert summary["total_actual"] == 450
    assert summary["total_variance"] == 100


def test_budget_variance_warning_band():
    expenses = expenses_to_dataframe(
        [map_expense({"_id": "x", "category": "labor", "amount": 105, "status": "paid"})]
    )
    result = budget_variance([{"category": "labor", "planned_amount": 100}], expenses)
    assert result["lines"].loc[0, "status"] == "warning"


def test_cash_flow_fills_empty_periods_and_accumulates():
    df = cash_flow(_sample_payments(), "month", date(2025, 1, 1), date(2025, 3, 31))
    assert [p for p in df["period"]] == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]
    assert list(df["incoming"]) == [500, 0, 300]
    assert list(df["outgoing"]) == [200, 0, 0]
    assert list(df["net"]) == [300, 0, 300]
    assert list(df["cumulative"]) == [300, 300, 600]


def test_cash_flow_weekly_buckets_start_on_monday():
    df = cash_flow(_sample_payments(), "week", date(2025, 1, 1), date(2025, 1, 21))
    assert df["period"].iloc[0] == date(2024, 12, 30)
    assert df["incoming"].sum() == 500
    assert df["outgoing"].sum() == 200


def test_cash_flow_excludes_out_of_range_and_rejects_bad_grouping():
    df = cash_flow(_sample_payments(), "day", date(2025, 1, 1), date(2025, 1, 10))
    assert len(df) == 10
    assert df["outgoing"].sum() == 0
    with pytest.raises(ValueError):
        cash_flow(_sample_payments(), "year")


def test_preset_range():
    today = date(2025, 6, 15)
    assert preset_range("1m", today) == (date(2025, 5, 15), today)
    assert preset_range("3m", today) == (date(2025, 3, 15), today)
    assert preset_range("1y", today) == (date(2024, 6, 15), today)
    assert preset_range("all", today) == (date(2020, 1, 1), today)
    with pytest.raises(ValueError):
        preset_range("2w", today)


def test_financial_summary_profitability():
    budget = latest_approved_budget(_sample_budgets())
    summary = financial_summary(PROJECT, _sample_payments(), _sample_expenses(), budget)
    prof = summary["profitability"]
    assert prof["revenue"] == 800
    assert prof["costs"] == 450
    assert prof["gross_profit"] == 350
    assert prof["profit_margin"] == pytest.approx(43.75)
    assert prof["roi"] == pytest.approx(35.0)
    assert summary["budget"]["remaining"] == 150
    assert summary["budget"]["percent_used"] == pytest.approx(75.0)


def test_financial_summary_without_revenue_or_budget():
    empty = ProjectModel(id="p2", name="Empty")
    summary = financial_summary(empty, payments_to_dataframe([]), expenses_to_dataframe([]))
    assert summary["budget"] is None
    assert summary["profitability"]["profit_margin"] == 0
    assert summary["profitability"]["roi"] == 0


def test_project_comparison_one_row_per_project():
    other = ProjectModel(id="p2", name="Warehouse", contract_value=50.0)
    table = project_comparison([PROJECT, other], _sample_payments(), _sample_expenses())
    assert list(table["project"]) == ["Tower A", "Warehouse"]
    assert list(table["received"]) == [800, 0]
    assert list(table["spent"]) == [450, 0]


def test_finance_context_without_budget_warns():
    ctx = build_finance_context(
        PROJECT,
        _sample_payments(),
        _sample_expenses(),
        budgets_to_dataframe([]),
        preset="all",
        today=date(2025, 3, 31),
    )
    assert ctx.variance is None
    assert ctx.warnings
    assert ctx.cash_flow["cumulative"].iloc[-1] == 600
    assert isinstance(ctx.categories, pd.DataFrame)
