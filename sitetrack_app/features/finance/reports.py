"""Finance reductions over payment, expense, and budget frames.

All functions take the frames built by ``core.mappers`` and return plain
dicts or DataFrames; nothing here talks to the backend.

Status conventions:

* payments count once ``confirmed``; ``pending`` ones are reported apart,
* expenses count as spent when ``paid`` or ``approved``,
* the effective budget is the latest ``approved`` one by effective date.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, timedelta
from typing import Any

import pandas as pd

from sitetrack_app.core.config import (
    CASH_FLOW_EPOCH,
    CASH_FLOW_GROUPINGS,
    CASH_FLOW_PRESETS,
    VARIANCE_OVERBUDGET_PCT,
)
from sitetrack_app.core.models import ProjectModel

logger = logging.getLogger(__name__)

SPENT_EXPENSE_STATUSES = ("paid", "approved")


def _amount_sum(df: pd.DataFrame) -> float:
    if df.empty:
        return 0.0
    return float(pd.to_numeric(df["amount"], errors="coerce").fillna(0).sum())


def _pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


# ------------------ Payments & Expenses ------------------
def payment_statistics(payments: pd.DataFrame) -> dict[str, Any]:
    """Totals of confirmed and pending payments by direction."""
    if payments.empty:
        return {
            "total_incoming": 0.0,
            "total_outgoing": 0.0,
            "pending_incoming": 0.0,
            "pending_outgoing": 0.0,
            "net_cash_flow": 0.0,
            "payment_count": 0,
            "pending_count": 0,
        }
    confirmed = payments[payments["status"] == "confirmed"]
    pending = payments[payments["status"] == "pending"]
    total_in = _amount_sum(confirmed[confirmed["type"] == "incoming"])
    total_out = _amount_sum(confirmed[confirmed["type"] == "outgoing"])
    return {
        "total_incoming": total_in,
        "total_outgoing": total_out,
        "pending_incoming": _amount_sum(pending[pending["type"] == "incoming"]),
        "pending_outgoing": _amount_sum(pending[pending["type"] == "outgoing"]),
        "net_cash_flow": total_in - total_out,
        "payment_count": int(len(payments)),
        "pending_count": int(len(pending)),
    }


def category_rollup(expenses: pd.DataFrame) -> pd.DataFrame:
    """Per-category total and count, largest total first."""
    if expenses.empty:
        return pd.DataFrame(columns=["category", "total", "count"])
    df = expenses.assign(amount=pd.to_numeric(expenses["amount"], errors="coerce").fillna(0))
    grouped = (
        df.groupby("category", dropna=False)
        .agg(total=("amount", "sum"), count=("amount", "size"))
        .reset_index()
        .sort_values(["total", "category"], ascending=[False, True], kind="mergesort")
        .reset_index(drop=True)
    )
    return grouped


def expense_statistics(expenses: pd.DataFrame) -> dict[str, Any]:
    """Paid / approved / pending totals plus a category breakdown of spent money."""
    if expenses.empty:
        return {
            "total_paid": 0.0,
            "total_approved": 0.0,
            "total_pending": 0.0,
            "expense_count": 0,
            "pending_count": 0,
            "by_category": {},
        }
    by_status = {s: expenses[expenses["status"] == s] for s in ("paid", "approved", "pending")}
    spent = expenses[expenses["status"].isin(SPENT_EXPENSE_STATUSES)]
    rollup = category_rollup(spent)
    return {
        "total_paid": _amount_sum(by_status["paid"]),
        "total_approved": _amount_sum(by_status["approved"]),
        "total_pending": _amount_sum(by_status["pending"]),
        "expense_count": int(len(expenses)),
        "pending_count": int(len(by_status["pending"])),
        "by_category": dict(zip(rollup["category"], rollup["total"].astype(float))),
    }


# ------------------ Budgets ------------------
def latest_approved_budget(budgets: pd.DataFrame) -> pd.Series | None:
    """Return the approved budget with the latest effective date, if any."""
    if budgets.empty:
        return None
    approved = budgets[budgets["status"] == "approved"]
    if approved.empty:
        return None
    dates = pd.to_datetime(approved["effective_date"], errors="coerce")
    return approved.loc[dates.sort_values(ascending=False, na_position="last").index[0]]


def _variance_status(variance_percent: float) -> str:
    if variance_percent < VARIANCE_OVERBUDGET_PCT:
        return "overbudget"
    if variance_percent < 0:
        return "warning"
    return "ontrack"


def budget_variance(budget_lines: Sequence[dict[str, Any]], expenses: pd.DataFrame) -> dict[str, Any]:
    """Compare planned amounts per category against actual spending.

    Parameters
    ----------
    budget_lines : sequence of dict
        Items with ``category`` and ``planned_amount`` keys.
    expenses : DataFrame
        Expense frame; only paid and approved rows count as actual.

    Returns
    -------
    dict
        ``lines`` (DataFrame with planned, actual, variance, variance_percent,
        status) and ``summary`` totals.
    """
    spent = expenses[expenses["status"].isin(SPENT_EXPENSE_STATUSES)] if not expenses.empty else expenses
    actual_by_category: dict[str, float] = {}
    if not spent.empty:
        amounts = pd.to_numeric(spent["amount"], errors="coerce").fillna(0)
        actual_by_category = amounts.groupby(spent["category"]).sum().astype(float).to_dict()

    records = []
    for line in budget_lines:
        category = line.get("category")
        planned = float(line.get("planned_amount") or 0)
        actual = float(actual_by_category.get(category, 0.0))
        variance = planned - actual
        variance_pct = _pct(variance, planned)
        records.append(
            {
                "category": category,
                "planned": planned,
                "actual": actual,
                "variance": variance,
                "variance_percent": variance_pct,
                "status": _variance_status(variance_pct),
            }
        )
    lines = pd.DataFrame.from_records(
        records,
        columns=["category", "planned", "actual", "variance", "variance_percent", "status"],
    )
    total_planned = float(lines["planned"].sum()) if records else 0.0
    total_actual = float(lines["actual"].sum()) if records else 0.0
    total_variance = total_planned - total_actual
    return {
        "lines": lines,
        "summary": {
            "total_planned": total_planned,
            "total_actual": total_actual,
            "total_variance": total_variance,
            "variance_percent": _pct(total_variance, total_planned),
        },
    }


# ------------------ Cash Flow ------------------
def preset_range(preset: str, today: date | None = None) -> tuple[date, date]:
    """Resolve a cash-flow range preset (1m, 3m, 6m, 1y, all) ending today."""
    if preset not in CASH_FLOW_PRESETS:
        raise ValueError(f"Unknown range preset {preset!r}")
    end = today or date.today()
    if preset == "all":
        return CASH_FLOW_EPOCH, end
    if preset == "1y":
        return (pd.Timestamp(end) - pd.DateOffset(years=1)).date(), end
    months = int(preset[:-1])
    return (pd.Timestamp(end) - pd.DateOffset(months=months)).date(), end


def period_start(day: date, group_by: str) -> date:
    if group_by == "day":
        return day
    if group_by == "week":
        return day - timedelta(days=day.weekday())
    if group_by == "month":
        return day.replace(day=1)
    raise ValueError(f"Unknown cash flow grouping {group_by!r}")


def cash_flow(
    payments: pd.DataFrame,
    group_by: str = "month",
    start: date | None = None,
    end: date | None = None,
) -> pd.DataFrame:
    """Confirmed payments bucketed by period with a running net.

    Every period between ``start`` and ``end`` is present; periods without
    payments carry zeros.
    """
    if group_by not in CASH_FLOW_GROUPINGS:
        raise ValueError(f"Unknown cash flow grouping {group_by!r}")
    columns = ["period", "incoming", "outgoing", "net", "cumulative"]
    confirmed = payments[payments["status"] == "confirmed"] if not payments.empty else payments
    days = pd.to_datetime(confirmed["payment_date"], errors="coerce").dt.date if not confirmed.empty else None

    if start is None or end is None:
        if days is None or days.dropna().empty:
            return pd.DataFrame(columns=columns)
        start = start or days.dropna().min()
        end = end or days.dropna().max()
    if end < start:
        return pd.DataFrame(columns=columns)

    periods: dict[date, dict[str, float]] = {}
    current = start
    while current <= end:
        periods.setdefault(period_start(current, group_by), {"incoming": 0.0, "outgoing": 0.0})
        current += timedelta(days=1)

    if days is not None:
        for day, (_, row) in zip(days, confirmed.iterrows()):
            if day is None or pd.isna(day) or day < start or day > end:
                continue
            bucket = periods[period_start(day, group_by)]
            direction = "incoming" if row["type"] == "incoming" else "outgoing"
            bucket[direction] += float(row["amount"] or 0)

    df = pd.DataFrame(
        [{"period": p, **totals} for p, totals in sorted(periods.items())],
        columns=["period", "incoming", "outgoing"],
    )
    df["net"] = df["incoming"] - df["outgoing"]
    df["cumulative"] = df["net"].cumsum()
    return df[columns]


# ------------------ Summaries ------------------
def financial_summary(
    project: ProjectModel,
    payments: pd.DataFrame,
    expenses: pd.DataFrame,
    budget: pd.Series | None = None,
) -> dict[str, Any]:
    """Cash flow, budget usage, and profitability for one project.

    Revenue is confirmed incoming payments; costs are paid and approved
    expenses.
    """
    pay = payment_statistics(payments)
    exp = expense_statistics(expenses)
    revenue = pay["total_incoming"]
    costs = exp["total_paid"] + exp["total_approved"]
    gross_profit = revenue - costs

    budget_block = None
    if budget is not None:
        total = float(budget["total_budget"] or 0)
        budget_block = {
            "name": budget["name"],
            "total": total,
            "spent": costs,
            "remaining": total - costs,
            "percent_used": _pct(costs, total),
        }
    return {
        "project": {
            "name": project.name,
            "client": project.client,
            "contract_value": project.contract_value,
        },
        "cash_flow": {
            "total_incoming": pay["total_incoming"],
            "total_outgoing": pay["total_outgoing"],
            "net_cash_flow": pay["net_cash_flow"],
        },
        "budget": budget_block,
        "profitability": {
            "revenue": revenue,
            "costs": costs,
            "gross_profit": gross_profit,
            "profit_margin": _pct(gross_profit, revenue),
            "roi": _pct(gross_profit, project.contract_value),
        },
    }


def project_comparison(
    projects: Sequence[ProjectModel],
    payments: pd.DataFrame,
    expenses: pd.DataFrame,
) -> pd.DataFrame:
    """One row per project: contract value, received, spent, profit, margin."""
    records = []
    for project in projects:
        pay = payments[payments["project_id"] == project.id] if not payments.empty else payments
        exp = expenses[expenses["project_id"] == project.id] if not expenses.empty else expenses
        summary = financial_summary(project, pay, exp)
        prof = summary["profitability"]
        records.append(
            {
                "project": project.name,
                "contract_value": project.contract_value,
                "received": prof["revenue"],
                "spent": prof["costs"],
                "gross_profit": prof["gross_profit"],
                "profit_margin": prof["profit_margin"],
                "percent_complete": project.percent_complete,
            }
        )
    logger.debug("Compared %d project(s)", len(records))
    return pd.DataFrame.from_records(
        records,
        columns=[
            "project",
            "contract_value",
            "received",
            "spent",
            "gross_profit",
            "profit_margin",
            "percent_complete",
        ],
    )
