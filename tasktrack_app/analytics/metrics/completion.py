"""Cumulative task completion series."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pandas as pd

from tasktrack_app.core.config import DEFAULT_DATE_RANGE

from .dates import days_from_range, derive_task_dates, resolve_today
from .numeric import round_half_up

COMPLETION_COLUMNS = ["date", "completed", "pending", "total", "completion_rate"]


def calculate_task_completion(
    df: pd.DataFrame,
    date_range: str = DEFAULT_DATE_RANGE,
    *,
    now: datetime | date | None = None,
) -> pd.DataFrame:
    """One row per day from ``today - days`` through today.

    Each row counts the tasks whose derived date falls on or before that day
    (a running total, not a per-day delta), split into done and pending.
    """
    days = days_from_range(date_range)
    today = resolve_today(now)
    if df.empty:
        task_days = pd.Series(pd.to_datetime([]))
        done = pd.Series([], dtype=bool)
    else:
        task_days = derive_task_dates(df, today=today)
        done = df["status"] == "done"

    rows = []
    for offset in range(days, -1, -1):
        day = today - timedelta(days=offset)
        upto = task_days <= pd.Timestamp(day)
        total = int(upto.sum())
        completed = int((upto & done).sum())
        rows.append(
            {
                "date": day.strftime("%Y-%m-%d"),
                "completed": completed,
                "pending": total - completed,
                "total": total,
                "completion_rate": round_half_up(completed / total * 100) if total else 0,
            }
        )
    return pd.DataFrame(rows, columns=COMPLETION_COLUMNS)
