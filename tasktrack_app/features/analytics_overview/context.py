"""Pure helpers to build the analytics dashboard context (no Streamlit)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

import numpy as np
import pandas as pd

from tasktrack_app.analytics.aggregations.project import (
    calculate_project_progress,
    calculate_time_analytics,
)
from tasktrack_app.analytics.metrics.completion import calculate_task_completion
from tasktrack_app.analytics.metrics.productivity import (
    calculate_productivity_metrics,
    calculate_trends,
)
from tasktrack_app.analytics.segments.filters import filter_tasks
from tasktrack_app.core.models import DashboardFilters, ProductivityMetrics, TrendPoint


@dataclass(slots=True)
class AnalyticsContext:
    tasks: pd.DataFrame
    task_completion: pd.DataFrame
    time_analytics: pd.DataFrame
    project_progress: pd.DataFrame
    productivity: ProductivityMetrics
    trends: dict[str, list[TrendPoint]] = field(default_factory=dict)


def build_analytics_context(
    df: pd.DataFrame,
    filters: DashboardFilters | None = None,
    *,
    now: datetime | date | None = None,
    rng: np.random.Generator | None = None,
) -> AnalyticsContext:
    filters = filters or DashboardFilters()
    filtered = filter_tasks(df, filters, now=now)
    return AnalyticsContext(
        tasks=filtered,
        task_completion=calculate_task_completion(filtered, filters.date_range, now=now),
        time_analytics=calculate_time_analytics(filtered),
        project_progress=calculate_project_progress(filtered),
        productivity=calculate_productivity_metrics(filtered),
        trends={
            "completion": calculate_trends(filtered, "completion", rng=rng),
            "productivity": calculate_trends(filtered, "productivity", rng=rng),
        },
    )
