"""Project and task-type aggregations."""

from __future__ import annotations

import pandas as pd

from tasktrack_app.analytics.metrics.numeric import round1, round_half_up

TIME_ANALYTICS_COLUMNS = [
    "project",
    "task_type",
    "estimated_hours",
    "actual_hours",
    "accuracy",
    "variance",
]

PROJECT_PROGRESS_COLUMNS = [
    "project",
    "total_tasks",
    "completed_tasks",
    "in_progress_tasks",
    "todo_tasks",
    "completion_percentage",
    "avg_completion_time",
    "overdue_tasks",
]


def _accuracy(estimated: float, actual: float) -> int:
    if estimated <= 0:
        return 0
    return max(0, round_half_up((1 - abs(actual - estimated) / estimated) * 100))


def calculate_time_analytics(df: pd.DataFrame) -> pd.DataFrame:
    """Estimated (approved) vs actual (spent) hours per project and task type."""
    if df.empty:
        return pd.DataFrame(columns=TIME_ANALYTICS_COLUMNS)
    agg = (
        df.groupby(["project", "task_type"], sort=False, dropna=False)
        .agg(
            estimated_hours=("approved_hours", "sum"),
            actual_hours=("total_hours", "sum"),
        )
        .reset_index()
    )
    agg["accuracy"] = [
        _accuracy(e, a) for e, a in zip(agg["estimated_hours"], agg["actual_hours"])
    ]
    agg["variance"] = [round1(a - e) for e, a in zip(agg["estimated_hours"], agg["actual_hours"])]
    agg["estimated_hours"] = agg["estimated_hours"].apply(round1)
    agg["actual_hours"] = agg["actual_hours"].apply(round1)
    return agg[TIME_ANALYTICS_COLUMNS]


def calculate_project_progress(df: pd.DataFrame) -> pd.DataFrame:
    """Per-project task counts by status and completion stats.

    ``overdue_tasks`` is always 0 until due dates are carried on tasks.
    """
    if df.empty:
        return pd.DataFrame(columns=PROJECT_PROGRESS_COLUMNS)
    done = df["status"] == "done"
    work = df.assign(
        _done=done.astype(int),
        _in_progress=(df["status"] == "in-progress").astype(int),
        _todo=(df["status"] == "todo").astype(int),
        _done_hours=df["total_hours"].where(done, 0.0),
    )
    agg = (
        work.groupby("project", sort=False, dropna=False)
        .agg(
            total_tasks=("status", "size"),
            completed_tasks=("_done", "sum"),
            in_progress_tasks=("_in_progress", "sum"),
            todo_tasks=("_todo", "sum"),
            done_hours=("_done_hours", "sum"),
        )
        .reset_index()
    )
    agg["completion_percentage"] = [
        round_half_up(c / t * 100) if t else 0
        for c, t in zip(agg["completed_tasks"], agg["total_tasks"])
    ]
    agg["avg_completion_time"] = [
        round1(h / c) if c else 0.0 for h, c in zip(agg["done_hours"], agg["completed_tasks"])
    ]
    agg["overdue_tasks"] = 0
    for col in ("total_tasks", "completed_tasks", "in_progress_tasks", "todo_tasks"):
        agg[col] = agg[col].astype(int)
    return agg[PROJECT_PROGRESS_COLUMNS]
