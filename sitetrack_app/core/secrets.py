"""Read backend credentials from Streamlit secrets (``[backend]`` or top level)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def backend_credentials(secrets: Mapping[str, Any]) -> tuple[str | None, str | None]:
    """Return ``(deployment_url, auth_token)``; either may be None."""
    section = secrets.get("backend", {}) or {}
    url = section.get("CONVEX_URL") or secrets.get("CONVEX_URL")
    token = (
        section.get("CONVEX_AUTH_TOKEN")
        or secrets.get("CONVEX_AUTH_TOKEN")
        or section.get("CONVEX_TOKEN")
        or secrets.get("CONVEX_TOKEN")
    )
    return url, token
