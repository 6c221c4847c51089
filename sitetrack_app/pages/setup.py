"""Connection setup page: collect Convex credentials and initialize ProjectService."""

from __future__ import annotations

import streamlit as st

from sitetrack_app.app import register_page
from sitetrack_app.core.backend_client import BackendAPI
from sitetrack_app.core.config import APP_BASE_URL, SNAPSHOT_CACHE_TTL
from sitetrack_app.core.secrets import backend_credentials
from sitetrack_app.core.service import ProjectService


@register_page("Setup / Connection")
def setup_page():
    st.title("Backend Connection Setup")
    st.caption("Enter the deployment details (use the secrets manager in production).")

    secret_url, secret_token = backend_credentials(st.secrets)

    url = st.text_input(
        "Convex deployment URL",
        value=st.session_state.get("backend_url") or secret_url or "",
    )
    token = st.text_input("Auth token (optional)", type="password", value=secret_token or "")
    app_url = st.text_input(
        "Web app URL (for task links)",
        value=st.session_state.get("app_base_url") or APP_BASE_URL,
    )
    ttl = st.number_input(
        "Snapshot cache TTL (seconds)",
        min_value=0,
        max_value=600,
        value=int(SNAPSHOT_CACHE_TTL),
    )
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not url:
            st.error("Deployment URL is required.")
            return
        try:
            api = BackendAPI(url, token or None)
            api._cache_ttl = float(ttl)
            st.session_state["backend_url"] = url
            st.session_state["app_base_url"] = app_url
            st.session_state["project_service"] = ProjectService(api)
            st.success("Connection initialized.")
        except Exception as e:  # pragma: no cover
            st.error(f"Failed to initialize backend client: {e}")

    if "project_service" in st.session_state:
        st.info("ProjectService ready.")
