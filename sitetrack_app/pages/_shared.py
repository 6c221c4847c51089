"""Helpers shared by the dashboard pages."""

from __future__ import annotations

from datetime import date, datetime

import pytz
import streamlit as st

from sitetrack_app.core.config import APP_BASE_URL, TIMEZONE
from sitetrack_app.core.models import ProjectModel
from sitetrack_app.core.service import ProjectService


def require_service() -> ProjectService | None:
    service: ProjectService | None = st.session_state.get("project_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
    return service


def local_today() -> date:
    return datetime.now(pytz.timezone(TIMEZONE)).date()


def app_base_url() -> str:
    return st.session_state.get("app_base_url") or APP_BASE_URL


def select_project(service: ProjectService, key: str) -> ProjectModel | None:
    """Project picker remembering the last choice across pages."""
    projects = service.get_projects()
    if not projects:
        st.info("No projects found.")
        return None
    ids = [p.id for p in projects]
    by_id = {p.id: p for p in projects}
    current = st.session_state.get("project_id")
    index = ids.index(current) if current in ids else 0
    chosen = st.selectbox("Project", ids, index=index, format_func=lambda pid: by_id[pid].name, key=key)
    st.session_state["project_id"] = chosen
    return by_id[chosen]
