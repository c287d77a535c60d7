from datetime import date

import pandas as pd

from tasktrack_app.analytics.aggregations.project import (
    calculate_project_progress,
    calculate_time_analytics,
)
from tasktrack_app.analytics.metrics.completion import calculate_task_completion
from tasktrack_app.core.mappers import tasks_to_dataframe
from tasktrack_app.core.models import TaskModel
from tasktrack_app.visual.charts import completion_chart, project_progress_chart, time_variance_chart


def _sample_df():
    return tasks_to_dataframe(
        TaskModel(
            task_id=str(i),
            task_type="Bug",
            description=f"Sample task {i}",
            total_hours=float(i),
            approved_hours=2.0,
            project="Apollo",
            month="June",
            status="done" if i % 2 else "todo",
            date=date(2024, 6, 10 + i),
        )
        for i in range(4)
    )


def test_completion_chart():
    completion = calculate_task_completion(_sample_df(), "7d", now=date(2024, 6, 15))
    assert completion_chart(completion) is not None
    assert completion_chart(pd.DataFrame()) is None


def test_progress_and_variance_charts():
    df = _sample_df()
    assert project_progress_chart(calculate_project_progress(df)) is not None
    assert time_variance_chart(calculate_time_analytics(df)) is not None
    assert time_variance_chart(None) is None
