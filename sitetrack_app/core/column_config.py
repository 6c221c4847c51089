"""Load and expose column configuration from YAML (with fallbacks)."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .config import DISPLAY_ORDER_DETAIL, DISPLAY_ORDER_TASK_LIST, TASK_CORE_COLUMNS

_CACHE: dict[str, list[str]] | None = None


def _fallback_sets() -> dict[str, list[str]]:
    return {
        "detail": list(DISPLAY_ORDER_DETAIL),
        "core": list(TASK_CORE_COLUMNS),
        "task_list": list(DISPLAY_ORDER_TASK_LIST),
    }


def load_column_sets(base_path: str | Path | None = None, *, reload: bool = False):
    global _CACHE
    if _CACHE is not None and not reload:
        return _CACHE
    base = Path(base_path or Path(__file__).resolve().parent.parent)
    yaml_path = base / "columns.yaml"
    if not yaml_path.exists():
        _CACHE = _fallback_sets()
        return _CACHE
    try:
        data = yaml.safe_load(yaml_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        logging.getLogger(__name__).warning("Ignoring unreadable %s: %s", yaml_path, exc)
        _CACHE = _fallback_sets()
        return _CACHE
    sets = data.get("sets", {}) or {}
    fallback = _fallback_sets()
    _CACHE = {name: sets.get(name) or cols for name, cols in fallback.items()}
    return _CACHE


def get_columns(set_name: str) -> list[str]:
    sets = load_column_sets()
    return sets.get(set_name, [])
