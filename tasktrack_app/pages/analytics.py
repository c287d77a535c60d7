"""Analytics page: productivity, completion, time and workload views."""

from __future__ import annotations

from datetime import datetime, time

import pandas as pd
import streamlit as st

from tasktrack_app.analytics.metrics.dates import resolve_today
from tasktrack_app.analytics.metrics.workload import calculate_workload_metrics
from tasktrack_app.app import register_page
from tasktrack_app.core.column_config import get_columns
from tasktrack_app.core.config import DATE_RANGE_DAYS, MONTH_NAMES, QUARTER_MONTHS, TASK_STATUSES
from tasktrack_app.core.models import DashboardFilters
from tasktrack_app.features.analytics_overview.context import build_analytics_context
from tasktrack_app.visual.charts import completion_chart, project_progress_chart, time_variance_chart
from tasktrack_app.visual.column_metadata import apply_column_metadata

DATE_RANGE_LABELS = {
    "7d": "Last 7 days",
    "30d": "Last 30 days",
    "90d": "Last 90 days",
    "1y": "Last year",
    "custom": "Custom range",
}


def _sidebar_filters(tasks: pd.DataFrame) -> DashboardFilters:
    st.sidebar.markdown("### Filters")
    options = [*DATE_RANGE_DAYS, "custom"]
    date_range = st.sidebar.selectbox(
        "Date range", options, index=options.index("30d"), format_func=DATE_RANGE_LABELS.get
    )
    custom = None
    if date_range == "custom":
        today = resolve_today()
        picked = st.sidebar.date_input("From / To", value=(today.replace(day=1), today))
        if isinstance(picked, tuple) and len(picked) == 2:
            custom = (datetime.combine(picked[0], time.min), datetime.combine(picked[1], time.min))
    projects = st.sidebar.multiselect("Projects", sorted(tasks["project"].dropna().unique()))
    task_types = st.sidebar.multiselect("Task types", sorted(tasks["task_type"].dropna().unique()))
    statuses = st.sidebar.multiselect("Statuses", list(TASK_STATUSES))
    return DashboardFilters(
        date_range=date_range,
        projects=projects,
        task_types=task_types,
        statuses=statuses,
        custom_date_range=custom,
    )


def _parse_leaves(text: str) -> list:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def _render_table(df: pd.DataFrame, set_name: str):
    cols = [c for c in get_columns(set_name) if c in df.columns] or list(df.columns)
    st.dataframe(df[cols], hide_index=True, column_config=apply_column_metadata(cols))


@register_page("Analytics")
def analytics_page():
    st.title("Task Analytics")
    tasks = st.session_state.get("tasks_df")
    if tasks is None or tasks.empty:
        st.info("Fetch tasks on the Auto Fetch Tasks page first.")
        return

    filters = _sidebar_filters(tasks)
    ctx = build_analytics_context(tasks, filters)
    metrics = ctx.productivity

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Completion rate", f"{metrics.completion_rate}%", help=f"{metrics.completed_tasks}/{metrics.total_tasks} done")
    c2.metric("Velocity", f"{metrics.task_velocity} / week")
    c3.metric("Productivity score", metrics.productivity_score)
    c4.metric("Estimation accuracy", f"{metrics.estimation_accuracy}%")
    st.caption(
        f"Avg hours per completed task: {metrics.avg_completion_time} · "
        f"Most productive day: {metrics.most_productive_day}"
    )

    tab_completion, tab_time, tab_projects, tab_workload = st.tabs(
        ["Completion", "Time", "Projects", "Workload"]
    )
    with tab_completion:
        chart = completion_chart(ctx.task_completion)
        if chart is None:
            st.info("No tasks in the selected window.")
        else:
            st.altair_chart(chart, use_container_width=True)
        with st.expander("Weekly trends (illustrative)"):
            trend_df = pd.DataFrame(
                [
                    {"metric": name, "period": p.period, "value": p.value, "change": p.change, "trend": p.trend}
                    for name, points in ctx.trends.items()
                    for p in points
                ]
            )
            st.dataframe(trend_df, hide_index=True)
    with tab_time:
        chart = time_variance_chart(ctx.time_analytics)
        if chart is None:
            st.info("No time data.")
        else:
            st.altair_chart(chart, use_container_width=True)
            _render_table(ctx.time_analytics, "time_analytics")
    with tab_projects:
        chart = project_progress_chart(ctx.project_progress)
        if chart is None:
            st.info("No project data.")
        else:
            st.altair_chart(chart, use_container_width=True)
            _render_table(ctx.project_progress, "project_progress")
    with tab_workload:
        quarter_view = st.toggle("Fiscal quarter view")
        periods = ["all", *(QUARTER_MONTHS if quarter_view else MONTH_NAMES)]
        period = st.selectbox("Period", periods)
        leaves = _parse_leaves(st.text_area("Leave days (one YYYY-MM-DD per line)"))
        scoped = tasks
        if period != "all":
            months = QUARTER_MONTHS[period] if quarter_view else [period]
            scoped = tasks[tasks["month"].isin(months)]
        try:
            workload = calculate_workload_metrics(scoped, leaves, period, quarter_view=quarter_view)
        except ValueError as exc:
            st.error(str(exc))
            return
        w1, w2, w3, w4 = st.columns(4)
        w1.metric("Tasks", workload.total_tasks)
        w2.metric("Hours logged", f"{workload.total_working_hours:.1f}")
        w3.metric("Effective days", f"{workload.effective_working_days}/{workload.total_working_days_in_period}")
        w4.metric("Productivity", f"{workload.productivity:.0%}")
        st.caption(
            f"{workload.period} {workload.year}: {workload.total_leaves} leave day(s), "
            f"{workload.total_approved_hours:.1f} approved hours."
        )
