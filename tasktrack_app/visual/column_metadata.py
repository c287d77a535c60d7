"""Central column metadata and helpers for table rendering."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import streamlit as st

# Mapping of raw column keys to (label, help text, format key)
# format key: "int" -> integer, "float1" -> 1 decimal float, None -> default text column
COLUMN_METADATA: dict[str, tuple[str, str, str | None]] = {
    # Task fields
    "description": ("Description", "Issue description (or subject when empty).", None),
    "task_type": ("Type", "Redmine tracker of the issue.", None),
    "project": ("Project", "Redmine project the issue belongs to.", None),
    "status": ("Status", "Task state derived from the Redmine status.", None),
    "total_hours": ("Total Hours", "Hours spent on the issue in Redmine.", "float1"),
    "approved_hours": ("Approved Hours", "Value of the 'Approved hours' custom field.", "float1"),
    "month": ("Month", "Month of the issue start date.", None),
    "note": ("Note", "Latest notes attached to the issue.", None),
    # Time analytics
    "estimated_hours": ("Estimated Hours", "Sum of approved hours.", "float1"),
    "actual_hours": ("Actual Hours", "Sum of spent hours.", "float1"),
    "accuracy": ("Accuracy %", "How close actual hours came to the estimate.", "int"),
    "variance": ("Variance", "Actual minus estimated hours.", "float1"),
    # Project progress
    "total_tasks": ("Tasks", "Tasks in the project.", "int"),
    "completed_tasks": ("Done", "Tasks in a closed status.", "int"),
    "in_progress_tasks": ("In Progress", "Tasks currently being worked on.", "int"),
    "todo_tasks": ("To Do", "Tasks not started yet.", "int"),
    "completion_percentage": ("Completion %", "Share of tasks that are done.", "int"),
    "avg_completion_time": (
        "Avg Hours (done)",
        "Average spent hours across completed tasks.",
        "float1",
    ),
    "overdue_tasks": ("Overdue", "Not tracked yet; always 0.", "int"),
}


def apply_column_metadata(
    columns: Iterable[str],
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a column_config dictionary with human labels and hover help."""

    config: dict[str, Any] = dict(existing or {})
    for col in columns:
        if col in config:
            continue
        meta = COLUMN_METADATA.get(col)
        if not meta:
            continue
        label, help_text, fmt = meta
        if fmt == "int":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%d")
        elif fmt == "float1":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%.1f")
        else:
            config[col] = st.column_config.Column(label, help=help_text)
    return config
