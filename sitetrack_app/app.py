"""Application entry point: page registry and router."""

from __future__ import annotations

import streamlit as st

PAGES = {}

PREFERRED_ORDER = [
    "Board",  # kanban by status
    "Timeline",  # project gantt
    "Finance",  # payments, expenses, budget
    "Team Workload",
    "Overdue Tasks",
    "Setup / Connection",
]


def register_page(label):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


def ordered_pages(labels) -> list[str]:
    ordered = [name for name in PREFERRED_ORDER if name in labels]
    trailing = sorted(name for name in labels if name not in PREFERRED_ORDER)
    return ordered + trailing


def main():
    st.sidebar.title("Construction Projects")
    pages = ordered_pages(list(PAGES.keys()))
    if not pages:
        st.write("No pages registered yet.")
        return
    missing = [name for name in PREFERRED_ORDER if name not in pages]
    if missing:
        st.sidebar.caption(f"(Info) Missing expected pages not yet registered: {', '.join(missing)}")
    # Without a service only the setup page is useful
    if "Setup / Connection" in pages and "project_service" not in st.session_state:
        default = pages.index("Setup / Connection")
    else:
        default = 0
    page = st.sidebar.selectbox("Page", pages, index=default)
    PAGES[page]()


if __name__ == "__main__":
    main()
