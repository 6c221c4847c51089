"""ProjectService: orchestrates fetching, mapping, and mutation submission."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

import pandas as pd

from .backend_client import BackendAPI
from .config import BACKEND_FUNCTIONS
from .mappers import (
    budgets_to_dataframe,
    expenses_to_dataframe,
    map_budget,
    map_expense,
    map_label,
    map_payment,
    map_priority,
    map_project,
    map_status,
    map_user,
    map_work_item,
    payments_to_dataframe,
    work_item_to_scheduled_task,
    work_items_to_dataframe,
)
from .models import LabelModel, PriorityModel, ProjectModel, ScheduledTask, StatusModel, UserModel, WorkItemModel
from .status import status_documents

ProgressCallback = Callable[[str, int | None, int | None], None]

logger = logging.getLogger(__name__)


def _as_list(snapshot: Any) -> list[dict[str, Any]]:
    if not snapshot:
        return []
    if isinstance(snapshot, list):
        return [doc for doc in snapshot if isinstance(doc, dict)]
    logger.warning("Expected a list snapshot, got %s", type(snapshot).__name__)
    return []


class ProjectService:
    def __init__(self, api: BackendAPI):
        self.api = api

    # ------------------ Metadata ------------------
    def get_statuses(self) -> list[StatusModel]:
        docs = status_documents(self.api.subscribe(BACKEND_FUNCTIONS["statuses"]))
        return [s for s in (map_status(d) for d in docs) if s is not None]

    def get_priorities(self) -> list[PriorityModel]:
        docs = _as_list(self.api.subscribe(BACKEND_FUNCTIONS["priorities"]))
        return [p for p in (map_priority(d) for d in docs) if p is not None]

    def get_labels(self) -> list[LabelModel]:
        return [map_label(d) for d in _as_list(self.api.subscribe(BACKEND_FUNCTIONS["labels"]))]

    def get_users(self) -> list[UserModel]:
        docs = _as_list(self.api.subscribe(BACKEND_FUNCTIONS["users"]))
        return [u for u in (map_user(d) for d in docs) if u is not None]

    def get_projects(self) -> list[ProjectModel]:
        return [map_project(d) for d in _as_list(self.api.subscribe(BACKEND_FUNCTIONS["projects"]))]

    # ------------------ Work Items ------------------
    def fetch_work_items(
        self,
        project_id: str | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> list[WorkItemModel]:
        if progress:
            progress("Loading tasks", None, None)
        raw = _as_list(self.api.subscribe(BACKEND_FUNCTIONS["tasks"]))
        if project_id:
            raw = [doc for doc in raw if str(doc.get("projectId") or "") == project_id]
        if progress:
            progress("Resolving projects", None, None)
        projects = {p.id: p for p in self.get_projects()} if raw else {}
        items = []
        for idx, doc in enumerate(raw, start=1):
            items.append(map_work_item(doc, projects=projects))
            if progress:
                progress("Mapping tasks", idx, len(raw))
        return items

    def fetch_work_items_frame(
        self,
        project_id: str | None = None,
        *,
        progress: ProgressCallback | None = None,
    ) -> pd.DataFrame:
        items = self.fetch_work_items(project_id, progress=progress)
        if not items:
            return pd.DataFrame()
        df = work_items_to_dataframe(items)
        if "created" in df.columns:
            df["created"] = pd.to_datetime(df["created"], errors="coerce", utc=True)
            return df.sort_values(by="created", ascending=False, na_position="last")
        return df

    def refresh_work_items(self) -> int:
        """Pull the latest pushed task snapshot into the cache; returns its size."""
        stream = self.api.watch(BACKEND_FUNCTIONS["tasks"])
        try:
            snapshot = next(stream, None)
        finally:
            stream.close()
        return len(_as_list(snapshot))

    def update_task_status(self, task_id: str, status_id: str) -> Any:
        logger.info("Moving task %s to status %s", task_id, status_id)
        return self.api.submit(BACKEND_FUNCTIONS["update_status"], {"id": task_id, "statusId": status_id})

    def update_task_priority(self, task_id: str, priority_id: str) -> Any:
        logger.info("Setting priority of task %s to %s", task_id, priority_id)
        return self.api.submit(BACKEND_FUNCTIONS["update_priority"], {"id": task_id, "priorityId": priority_id})

    def update_task_assignee(self, task_id: str, assignee_id: str | None) -> Any:
        logger.info("Assigning task %s to %s", task_id, assignee_id or "nobody")
        args: dict[str, Any] = {"id": task_id}
        if assignee_id:
            args["assigneeId"] = assignee_id
        return self.api.submit(BACKEND_FUNCTIONS["update_assignee"], args)

    # ------------------ Projects & Schedule ------------------
    def fetch_project(self, project_id: str) -> ProjectModel | None:
        raw = self.api.subscribe(BACKEND_FUNCTIONS["project_with_tasks"], {"id": project_id})
        if not isinstance(raw, dict):
            return None
        return map_project(raw)

    def fetch_scheduled_tasks(self, project_id: str, *, today: date | None = None) -> list[ScheduledTask]:
        raw = self.api.subscribe(BACKEND_FUNCTIONS["project_with_tasks"], {"id": project_id})
        if not isinstance(raw, dict):
            return []
        project = map_project(raw)
        tasks = []
        for doc in _as_list(raw.get("tasks")):
            item = map_work_item(doc, projects={project.id: project})
            tasks.append(work_item_to_scheduled_task(item, today=today))
        return tasks

    # ------------------ Finance ------------------
    def fetch_payments(self, project_id: str) -> pd.DataFrame:
        raw = _as_list(self.api.subscribe(BACKEND_FUNCTIONS["payments"], {"projectId": project_id}))
        return payments_to_dataframe(map_payment(d) for d in raw)

    def fetch_expenses(self, project_id: str) -> pd.DataFrame:
        raw = _as_list(self.api.subscribe(BACKEND_FUNCTIONS["expenses"], {"projectId": project_id}))
        return expenses_to_dataframe(map_expense(d) for d in raw)

    def fetch_budgets(self, project_id: str) -> pd.DataFrame:
        raw = _as_list(self.api.subscribe(BACKEND_FUNCTIONS["budgets"], {"projectId": project_id}))
        return budgets_to_dataframe(map_budget(d) for d in raw)
