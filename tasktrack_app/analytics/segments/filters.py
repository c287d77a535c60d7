"""DataFrame filters for the analytics dashboard."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pandas as pd

from tasktrack_app.analytics.metrics.dates import (
    days_from_range,
    derive_task_dates,
    resolve_today,
    to_date,
)
from tasktrack_app.core.models import DashboardFilters


def is_within_date_range(
    day: date,
    date_range: str,
    custom_range: tuple[datetime, datetime] | None,
    today: date,
) -> bool:
    if date_range == "custom" and custom_range:
        start, end = to_date(custom_range[0]), to_date(custom_range[1])
        return start <= day <= end
    start = today - timedelta(days=days_from_range(date_range))
    return start <= day <= today


def filter_tasks(
    df: pd.DataFrame,
    filters: DashboardFilters,
    *,
    now: datetime | date | None = None,
) -> pd.DataFrame:
    """Apply date window, project, task type and status filters.

    Dimensions combine with AND; options within one dimension combine with
    OR. An empty option list lets every task through.
    """
    if df.empty:
        return df
    today = resolve_today(now)
    days = derive_task_dates(df, today=today).dt.date
    mask = days.apply(
        lambda d: is_within_date_range(d, filters.date_range, filters.custom_date_range, today)
    ).astype(bool)
    if filters.projects:
        mask &= df["project"].isin(filters.projects)
    if filters.task_types:
        mask &= df["task_type"].isin(filters.task_types)
    if filters.statuses:
        mask &= df["status"].isin(filters.statuses)
    return df[mask]
