"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``sitetrack_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

from importlib import import_module
from pathlib import Path

import streamlit as st

from sitetrack_app.app import main
from sitetrack_app.core.secrets import backend_credentials

st.set_page_config(layout="wide")


def _auto_init_project_service():
    """Connect to the Convex deployment from Streamlit secrets if available."""
    if "project_service" in st.session_state:
        return

    url, token = backend_credentials(st.secrets)
    if url:
        st.sidebar.info("Secrets found, connecting to the backend...")
        try:
            from sitetrack_app.core.backend_client import BackendAPI
            from sitetrack_app.core.service import ProjectService

            api = BackendAPI(url, token)
            st.session_state["backend_url"] = url
            st.session_state["project_service"] = ProjectService(api)
            st.sidebar.success("Backend connection ready.")
        except Exception as e:
            st.sidebar.error(f"Backend connection failed: {e}")
            # Clear any partial state to ensure user is directed to setup
            st.session_state.pop("project_service", None)
    else:
        st.sidebar.warning("Backend secrets not found. Please use the Setup page.")


_auto_init_project_service()

PAGES_DIR = Path(__file__).parent / "sitetrack_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"sitetrack_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover - defensive
        print(f"Failed importing page {mod_name}: {e}")

if __name__ == "__main__":
    main()
