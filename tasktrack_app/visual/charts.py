"""Chart builders (Altair) for the analytics dashboard."""

from __future__ import annotations

import altair as alt
import pandas as pd


def completion_chart(completion: pd.DataFrame):
    """Stacked done/pending area over the cumulative completion series."""
    if completion is None or completion.empty:
        return None
    tmp = completion.copy()
    tmp["date"] = pd.to_datetime(tmp["date"])
    long = tmp.melt(
        id_vars=["date", "completion_rate"],
        value_vars=["completed", "pending"],
        var_name="state",
        value_name="count",
    )
    area = (
        alt.Chart(long)
        .mark_area(opacity=0.7)
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("count:Q", stack=True, title="Tasks"),
            color=alt.Color(
                "state:N",
                scale=alt.Scale(domain=["completed", "pending"], range=["#2ca02c", "#ff7f0e"]),
                legend=alt.Legend(title="State"),
            ),
            tooltip=[
                alt.Tooltip("date:T", title="Date"),
                alt.Tooltip("state:N", title="State"),
                alt.Tooltip("count:Q", title="Tasks"),
                alt.Tooltip("completion_rate:Q", title="Completion %"),
            ],
        )
    )
    return area.properties(height=280)


def project_progress_chart(progress: pd.DataFrame):
    if progress is None or progress.empty:
        return None
    long = progress.melt(
        id_vars=["project"],
        value_vars=["completed_tasks", "in_progress_tasks", "todo_tasks"],
        var_name="state",
        value_name="tasks",
    )
    long["state"] = long["state"].str.replace("_tasks", "", regex=False).str.replace("_", " ")
    return (
        alt.Chart(long)
        .mark_bar()
        .encode(
            y=alt.Y("project:N", title="Project", sort="-x"),
            x=alt.X("tasks:Q", stack=True, title="Tasks"),
            color=alt.Color("state:N", legend=alt.Legend(title="State")),
            tooltip=["project:N", "state:N", "tasks:Q"],
        )
        .properties(height=alt.Step(28))
    )


def time_variance_chart(time_analytics: pd.DataFrame):
    if time_analytics is None or time_analytics.empty:
        return None
    tmp = time_analytics.copy()
    tmp["label"] = tmp["project"].astype(str) + " / " + tmp["task_type"].astype(str)
    return (
        alt.Chart(tmp)
        .mark_bar()
        .encode(
            x=alt.X("variance:Q", title="Actual - Estimated (h)"),
            y=alt.Y("label:N", title=None, sort="x"),
            color=alt.condition(alt.datum.variance > 0, alt.value("#d62728"), alt.value("#1f77b4")),
            tooltip=[
                alt.Tooltip("label:N", title="Project / Type"),
                alt.Tooltip("estimated_hours:Q", title="Estimated"),
                alt.Tooltip("actual_hours:Q", title="Actual"),
                alt.Tooltip("accuracy:Q", title="Accuracy %"),
            ],
        )
        .properties(height=alt.Step(24))
    )
