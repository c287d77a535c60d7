"""Productivity metrics and (placeholder) trend series."""

from __future__ import annotations

import numpy as np
import pandas as pd

from tasktrack_app.core.config import TREND_CHANGE_THRESHOLD, TREND_PERIODS, VELOCITY_WEEKS
from tasktrack_app.core.models import ProductivityMetrics, TrendPoint

from .numeric import round1, round_half_up

TREND_METRICS = ("completion", "productivity")


def calculate_productivity_metrics(df: pd.DataFrame) -> ProductivityMetrics:
    """Summarize completion, velocity and estimation accuracy.

    Velocity spreads completed tasks over a fixed four-week window rather
    than the actual date span of the data. ``most_productive_day`` is a
    fixed placeholder.
    """
    total = int(len(df))
    if total == 0:
        return ProductivityMetrics()

    done = df["status"] == "done"
    completed = int(done.sum())
    completion_rate = round_half_up(completed / total * 100)
    avg_completion_time = round1(float(df.loc[done, "total_hours"].mean())) if completed else 0.0
    task_velocity = round1(completed / VELOCITY_WEEKS)

    speed_bonus = min(100 / avg_completion_time if avg_completion_time > 0 else 0, 20)
    score = round_half_up(completion_rate * 0.4 + min(task_velocity * 10, 40) + speed_bonus)

    estimated = df[df["approved_hours"] > 0]
    if estimated.empty:
        estimation_accuracy = 0
    else:
        per_task = (
            1 - (estimated["total_hours"] - estimated["approved_hours"]).abs() / estimated["approved_hours"]
        ).clip(lower=0)
        estimation_accuracy = round_half_up(float(per_task.mean()) * 100)

    return ProductivityMetrics(
        total_tasks=total,
        completed_tasks=completed,
        completion_rate=completion_rate,
        avg_completion_time=avg_completion_time,
        task_velocity=task_velocity,
        productivity_score=min(100, max(0, score)),
        estimation_accuracy=estimation_accuracy,
    )


def calculate_trends(
    df: pd.DataFrame,
    metric: str = "completion",
    *,
    rng: np.random.Generator | None = None,
) -> list[TrendPoint]:
    """Placeholder weekly trend: random values, not derived from ``df``.

    Pass a seeded ``rng`` for reproducible output.
    """
    if metric not in TREND_METRICS:
        raise ValueError(f"Unknown trend metric {metric!r}; expected one of {TREND_METRICS}")
    rng = rng or np.random.default_rng()
    points: list[TrendPoint] = []
    for index, period in enumerate(TREND_PERIODS):
        if metric == "completion":
            value = round_half_up(rng.random() * 100)
        else:
            value = round_half_up(rng.random() * 50 + 50)
        previous = round_half_up(rng.random() * 100) if index > 0 else value
        change = round_half_up((value - previous) / previous * 100) if previous > 0 else 0
        if change > TREND_CHANGE_THRESHOLD:
            trend = "up"
        elif change < -TREND_CHANGE_THRESHOLD:
            trend = "down"
        else:
            trend = "neutral"
        points.append(TrendPoint(period=period, value=value, change=change, trend=trend))
    return points
