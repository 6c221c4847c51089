"""Domain data models for construction tasks, projects, schedules, and finance records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(slots=True, frozen=True)
class StatusModel:
    id: str
    name: str
    color: str = "#6B7280"
    icon_name: str = "circle"


@dataclass(slots=True, frozen=True)
class PriorityModel:
    id: str
    name: str
    level: int | None = None
    color: str | None = None


@dataclass(slots=True, frozen=True)
class LabelModel:
    id: str
    name: str
    color: str | None = None


@dataclass(slots=True, frozen=True)
class UserModel:
    id: str
    name: str
    email: str | None = None
    avatar_url: str | None = None


@dataclass(slots=True)
class ProjectModel:
    id: str
    name: str
    client: str | None = None
    start_date: date | None = None
    target_date: date | None = None
    contract_value: float = 0.0
    percent_complete: float = 0.0
    status: StatusModel | None = None
    location: str | None = None


@dataclass(slots=True)
class WorkItemModel:
    id: str
    identifier: str
    title: str
    status: StatusModel
    priority: PriorityModel | None = None
    description: str = ""
    assignee: UserModel | None = None
    labels: list[LabelModel] = field(default_factory=list)
    project: ProjectModel | None = None
    created_at: datetime | None = None
    due_date: date | None = None
    completed_at: datetime | None = None
    rank: str | None = None


@dataclass(slots=True)
class ScheduledTask:
    """A bar on the Gantt timeline. ``end`` is inclusive."""

    id: str
    name: str
    start: date
    end: date
    progress: float | None = None
    dependencies: list[str] = field(default_factory=list)
    color: str | None = None
    group: str | None = None
    assignee: str | None = None


@dataclass(slots=True)
class PaymentModel:
    id: str
    project_id: str | None
    type: str
    amount: float
    status: str
    payment_date: date | None
    counterparty: str | None = None
    purpose: str | None = None
    payment_number: str | None = None


@dataclass(slots=True)
class ExpenseModel:
    id: str
    project_id: str | None
    category: str
    amount: float
    status: str
    expense_date: date | None
    vendor: str | None = None
    description: str | None = None
    expense_number: str | None = None


@dataclass(slots=True)
class BudgetLineModel:
    category: str
    planned_amount: float
    description: str | None = None


@dataclass(slots=True)
class BudgetModel:
    id: str
    project_id: str | None
    name: str
    total_budget: float
    status: str
    effective_date: date | None
    lines: list[BudgetLineModel] = field(default_factory=list)
