"""Progress reporting for Streamlit pages."""

from __future__ import annotations

import streamlit as st


class ProgressReporter:
    """Status box + progress bar driven by TaskService progress callbacks."""

    def __init__(self, title: str):
        self._status = st.status(title, expanded=False)
        self._bar = self._status.progress(0.0)
        self._finalized = False

    def callback(self, message: str, current: int | None = None, total: int | None = None) -> None:
        if self._finalized:
            return
        self._status.write(message)
        self._status.update(label=message)
        if current is not None and total:
            self._bar.progress(min(max(current / total, 0.0), 1.0))

    def complete(self, message: str) -> None:
        if self._finalized:
            return
        self._bar.progress(1.0)
        self._status.update(label=message, state="complete")
        self._finalized = True

    def error(self, message: str) -> None:
        if self._finalized:
            return
        self._status.update(label=message, state="error", expanded=True)
        self._finalized = True
