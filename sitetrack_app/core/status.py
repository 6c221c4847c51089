"""Status normalization and categorization utilities.

Board columns come from the deployment's status metadata, so the helpers here
only need to recognise terminal states and build a usable status list when the
metadata query returns nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .config import DEFAULT_STATUSES, STATUS_ICONS, TERMINAL_STATUSES


def clean_status_name(value: str | None) -> str:
    """Sanitize a status string, converting null-like values to "Unknown"."""
    if not value:
        return "Unknown"
    text = str(value).strip()
    if not text or text.lower() in {"nan", "none", "null"}:
        return "Unknown"
    return text


def is_terminal_status(value: str | None) -> bool:
    """Check if a status name closes a task (Done, Cancelled, ...).

    Examples
    --------
    >>> is_terminal_status("Done")
    True
    >>> is_terminal_status("In Progress")
    False
    """
    if not value:
        return False
    return str(value).strip().lower() in TERMINAL_STATUSES


def status_icon(icon_name: str | None) -> str:
    """Resolve a status icon name, falling back to the plain circle."""
    name = (icon_name or "").strip().lower()
    return name if name in STATUS_ICONS else "circle"


def status_documents(raw: Iterable[Mapping[str, Any]] | None) -> list[Mapping[str, Any]]:
    """Return the status documents to build columns from, defaulting when empty."""
    docs = [doc for doc in raw or [] if isinstance(doc, Mapping)]
    return docs or list(DEFAULT_STATUSES)


def status_label(name: str | None, icon_name: str | None = None) -> str:
    """Column header text: the status glyph followed by the cleaned name."""
    return f"{STATUS_ICONS[status_icon(icon_name)]} {clean_status_name(name)}"
