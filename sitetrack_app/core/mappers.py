"""Mapping raw backend documents into domain models and DataFrames."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from typing import Any

import pandas as pd

from .config import (
    DEFAULT_TASK_DURATION_DAYS,
    PRIORITY_RANK,
    UNASSIGNED_LABEL,
    UNRANKED_PRIORITY,
    normalize_priority_name,
)
from .models import (
    BudgetLineModel,
    BudgetModel,
    ExpenseModel,
    LabelModel,
    PaymentModel,
    PriorityModel,
    ProjectModel,
    ScheduledTask,
    StatusModel,
    UserModel,
    WorkItemModel,
)
from .status import is_terminal_status

logger = logging.getLogger(__name__)

NO_STATUS = StatusModel(id="no-status", name="No status", color="#6b7280", icon_name="circle")


def parse_dt(val: Any) -> datetime | None:
    if val is None or val == "":
        return None
    # Convex stores some timestamps as epoch milliseconds
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        ts = pd.to_datetime(val, unit="ms", utc=True, errors="coerce")
    else:
        ts = pd.to_datetime(val, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def parse_day(val: Any) -> date | None:
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if isinstance(val, str) and len(val) == 10:
        # Plain "YYYY-MM-DD" values are calendar days, not instants
        try:
            return date.fromisoformat(val)
        except ValueError:
            return None
    dt = parse_dt(val)
    return dt.date() if dt else None


def kebab_icon_name(value: str | None) -> str:
    """Normalize an icon name such as ``CheckCircle`` to ``check-circle``."""
    if not value:
        return "circle"
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", str(value).strip())
    return text.replace("_", "-").replace(" ", "-").lower()


def map_status(raw: Mapping[str, Any] | None) -> StatusModel | None:
    if not raw:
        return None
    return StatusModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        name=raw.get("name") or "",
        color=raw.get("color") or "#6B7280",
        icon_name=kebab_icon_name(raw.get("iconName")),
    )


def map_priority(raw: Mapping[str, Any] | None) -> PriorityModel | None:
    if not raw:
        return None
    level = raw.get("level")
    return PriorityModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        name=raw.get("name") or "",
        level=int(level) if isinstance(level, (int, float)) else None,
        color=raw.get("color"),
    )


def priority_rank(priority: PriorityModel | None) -> int:
    """Rank a priority for board ordering; lower ranks sort first.

    The backend's ``level`` wins when present; otherwise the canonical name
    decides. Missing or unknown priorities rank last.
    """
    if priority is None:
        return UNRANKED_PRIORITY
    if priority.level is not None:
        return priority.level
    return PRIORITY_RANK.get(normalize_priority_name(priority.name), UNRANKED_PRIORITY)


def map_label(raw: Mapping[str, Any]) -> LabelModel:
    return LabelModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        name=raw.get("name") or "",
        color=raw.get("color"),
    )


def map_user(raw: Mapping[str, Any] | None) -> UserModel | None:
    if not raw:
        return None
    return UserModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        name=raw.get("name") or raw.get("email") or "",
        email=raw.get("email"),
        avatar_url=raw.get("avatarUrl"),
    )


def map_project(raw: Mapping[str, Any]) -> ProjectModel:
    return ProjectModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        name=raw.get("name") or "",
        client=raw.get("client"),
        start_date=parse_day(raw.get("startDate")),
        target_date=parse_day(raw.get("targetDate")),
        contract_value=float(raw.get("contractValue") or 0.0),
        percent_complete=float(raw.get("percentComplete") or 0.0),
        status=map_status(raw.get("status")),
        location=raw.get("location"),
    )


def map_work_item(
    raw: Mapping[str, Any],
    *,
    projects: Mapping[str, ProjectModel] | None = None,
) -> WorkItemModel:
    status = map_status(raw.get("status"))
    if status is None:
        status_id = raw.get("statusId")
        status = StatusModel(id=str(status_id), name="") if status_id else NO_STATUS

    project = None
    project_raw = raw.get("project")
    if isinstance(project_raw, Mapping):
        project = map_project(project_raw)
    elif projects and raw.get("projectId"):
        project = projects.get(str(raw.get("projectId")))

    labels = [map_label(lbl) for lbl in raw.get("labels") or [] if isinstance(lbl, Mapping)]

    return WorkItemModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        identifier=raw.get("identifier") or "",
        title=raw.get("title") or "",
        description=raw.get("description") or "",
        status=status,
        priority=map_priority(raw.get("priority")),
        assignee=map_user(raw.get("assignee")),
        labels=labels,
        project=project,
        created_at=parse_dt(raw.get("createdAt")),
        due_date=parse_day(raw.get("dueDate")),
        completed_at=parse_dt(raw.get("completedAt")),
        rank=raw.get("rank"),
    )


def work_item_to_scheduled_task(item: WorkItemModel, *, today: date | None = None) -> ScheduledTask:
    """Place a work item on the timeline.

    The bar runs from the creation day to the due date; items without a due
    date get a fixed default duration.
    """
    start = item.created_at.date() if item.created_at else (today or date.today())
    end = item.due_date or start + timedelta(days=DEFAULT_TASK_DURATION_DAYS)
    return ScheduledTask(
        id=item.id,
        name=item.title,
        start=start,
        end=end,
        progress=1.0 if is_terminal_status(item.status.name) else None,
        color=item.status.color,
        group=item.status.name or None,
        assignee=item.assignee.name if item.assignee else None,
    )


def work_items_to_dataframe(items: Iterable[WorkItemModel]) -> pd.DataFrame:
    rows = []
    for i in items:
        rows.append(
            {
                "id": i.id,
                "identifier": i.identifier,
                "title": i.title,
                "status": i.status.name,
                "status_id": i.status.id,
                "priority": normalize_priority_name(i.priority.name) if i.priority else "None",
                "priority_rank": priority_rank(i.priority),
                "assignee": i.assignee.name if i.assignee else UNASSIGNED_LABEL,
                "labels": [lbl.name for lbl in i.labels],
                "project": i.project.name if i.project else None,
                "project_id": i.project.id if i.project else None,
                "created": i.created_at,
                "due_date": i.due_date,
                "completed_at": i.completed_at,
            }
        )
    df = pd.DataFrame(rows)
    if "labels" in df.columns:

        def _format_labels(val):
            if not val:
                return ""
            unique = {v for v in val if v}
            return ", ".join(sorted(unique, key=lambda s: s.lower()))

        df["labels"] = df["labels"].apply(_format_labels)
    return df


def map_payment(raw: Mapping[str, Any]) -> PaymentModel:
    return PaymentModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        project_id=raw.get("projectId"),
        type=raw.get("type") or "incoming",
        amount=float(raw.get("amount") or 0.0),
        status=raw.get("status") or "pending",
        payment_date=parse_day(raw.get("paymentDate")),
        counterparty=raw.get("counterparty"),
        purpose=raw.get("purpose"),
        payment_number=raw.get("paymentNumber"),
    )


def map_expense(raw: Mapping[str, Any]) -> ExpenseModel:
    return ExpenseModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        project_id=raw.get("projectId"),
        category=raw.get("category") or "other",
        amount=float(raw.get("amount") or 0.0),
        status=raw.get("status") or "pending",
        expense_date=parse_day(raw.get("expenseDate")),
        vendor=raw.get("vendor"),
        description=raw.get("description"),
        expense_number=raw.get("expenseNumber"),
    )


def map_budget(raw: Mapping[str, Any]) -> BudgetModel:
    lines_raw = raw.get("lines") or raw.get("budgetLines") or []
    lines = []
    for line in lines_raw:
        if not isinstance(line, Mapping):
            logger.warning("Skipping malformed budget line in %s", raw.get("_id"))
            continue
        lines.append(
            BudgetLineModel(
                category=line.get("category") or "other",
                planned_amount=float(line.get("plannedAmount") or 0.0),
                description=line.get("description"),
            )
        )
    return BudgetModel(
        id=str(raw.get("_id") or raw.get("id") or ""),
        project_id=raw.get("projectId"),
        name=raw.get("name") or "",
        total_budget=float(raw.get("totalBudget") or 0.0),
        status=raw.get("status") or "draft",
        effective_date=parse_day(raw.get("effectiveDate")),
        lines=lines,
    )


def payments_to_dataframe(payments: Iterable[PaymentModel]) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "id": p.id,
                "project_id": p.project_id,
                "payment_number": p.payment_number,
                "type": p.type,
                "amount": p.amount,
                "status": p.status,
                "payment_date": p.payment_date,
                "counterparty": p.counterparty,
                "purpose": p.purpose,
            }
            for p in payments
        ],
        columns=[
            "id",
            "project_id",
            "payment_number",
            "type",
            "amount",
            "status",
            "payment_date",
            "counterparty",
            "purpose",
        ],
    )
    return df


def expenses_to_dataframe(expenses: Iterable[ExpenseModel]) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "id": e.id,
                "project_id": e.project_id,
                "expense_number": e.expense_number,
                "category": e.category,
                "amount": e.amount,
                "status": e.status,
                "expense_date": e.expense_date,
                "vendor": e.vendor,
                "description": e.description,
            }
            for e in expenses
        ],
        columns=[
            "id",
            "project_id",
            "expense_number",
            "category",
            "amount",
            "status",
            "expense_date",
            "vendor",
            "description",
        ],
    )
    return df


def budgets_to_dataframe(budgets: Iterable[BudgetModel]) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "id": b.id,
                "project_id": b.project_id,
                "name": b.name,
                "total_budget": b.total_budget,
                "status": b.status,
                "effective_date": b.effective_date,
                "lines": [{"category": ln.category, "planned_amount": ln.planned_amount} for ln in b.lines],
            }
            for b in budgets
        ],
        columns=["id", "project_id", "name", "total_budget", "status", "effective_date", "lines"],
    )
    return df
