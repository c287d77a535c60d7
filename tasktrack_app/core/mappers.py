"""Mapping raw Redmine issue JSON into TaskModel instances and DataFrames."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict
from datetime import date
from typing import Any

import pandas as pd

from tasktrack_app.analytics.metrics.dates import resolve_today

from .config import (
    APPROVED_HOURS_FIELD_ID,
    APPROVED_HOURS_FIELD_NAME,
    DEFAULT_TASK_TYPE,
    MONTH_NAMES,
    TASK_CORE_COLUMNS,
)
from .models import TaskModel
from .status import map_redmine_status


def parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def month_from_date(value: Any, *, today: date | None = None) -> str:
    """English month name of ``value``; the current month when it can't be parsed."""
    parsed = parse_date(value)
    if parsed is None:
        parsed = resolve_today(today)
    return MONTH_NAMES[parsed.month - 1]


def approved_hours(custom_fields: Any) -> float:
    if not isinstance(custom_fields, list):
        return 0.0
    for cf in custom_fields:
        if not isinstance(cf, dict):
            continue
        if cf.get("name") == APPROVED_HOURS_FIELD_NAME or cf.get("id") == APPROVED_HOURS_FIELD_ID:
            hours = pd.to_numeric(cf.get("value"), errors="coerce")
            if hours is None or pd.isna(hours):
                return 0.0
            return float(hours)
    return 0.0


def map_issue(raw: dict[str, Any], *, today: date | None = None) -> TaskModel:
    tracker = raw.get("tracker") or {}
    project = raw.get("project") or {}
    start = parse_date(raw.get("start_date"))
    return TaskModel(
        task_id=str(raw.get("id", "")),
        task_type=tracker.get("name") or DEFAULT_TASK_TYPE,
        description=raw.get("description") or raw.get("subject") or "",
        total_hours=float(raw.get("spent_hours") or 0),
        approved_hours=approved_hours(raw.get("custom_fields")),
        project=project.get("name") or "",
        month=month_from_date(start, today=today),
        status=map_redmine_status(raw.get("status")),
        note=raw.get("notes") or "",
        date=start,
    )


def tasks_to_dataframe(tasks: Iterable[TaskModel]) -> pd.DataFrame:
    rows = [asdict(t) for t in tasks]
    if not rows:
        return pd.DataFrame(columns=list(TASK_CORE_COLUMNS))
    df = pd.DataFrame(rows)
    for col in ("total_hours", "approved_hours"):
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0.0)
    return df
