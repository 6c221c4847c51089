"""Loading banners for Streamlit pages that fetch from the deployment."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import streamlit as st


class ProgressReporter:
    """Banner + progress bar; ``callback`` matches ProjectService progress hooks."""

    def __init__(self, title: str):
        self._container = st.container()
        self._container.info(title)
        self._message_placeholder = self._container.empty()
        self._progress_placeholder = self._container.progress(0.0)
        self._total: int | None = None
        self._current: int = 0
        self._finalized: bool = False

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        self.update(message, current=current, total=total)

    def update(self, message: str, *, current: int | None = None, total: int | None = None) -> None:
        if self._finalized:
            return
        if total is not None and total > 0:
            self._total = total
        if current is not None:
            self._current = max(0, current)
        self._message_placeholder.write(message)
        if self._total:
            self._progress_placeholder.progress(min(max(self._current / self._total, 0.0), 1.0))
        else:
            self._progress_placeholder.progress(0.0)

    def complete(self, message: str) -> None:
        if self._finalized:
            return
        self._progress_placeholder.progress(1.0)
        self._container.success(message)
        self._finalized = True

    def error(self, message: str) -> None:
        if self._finalized:
            return
        self._container.error(message)
        self._finalized = True


@contextmanager
def loading(title: str, done: str) -> Iterator[ProgressReporter]:
    """Show a banner while the block runs; report and re-raise failures."""
    reporter = ProgressReporter(title)
    try:
        yield reporter
    except Exception as exc:
        reporter.error(f"Failed to load data: {exc}")
        raise
    reporter.complete(done)
