"""Auto-fetch page: pull the tasks a user moved through review in a project."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from tasktrack_app.app import register_page
from tasktrack_app.core.config import MONTH_NAMES, SETTINGS
from tasktrack_app.core.service import TaskService
from tasktrack_app.visual.column_metadata import apply_column_metadata
from tasktrack_app.visual.progress import ProgressReporter
from tasktrack_app.visual.tables import prepare_task_table


def filter_by_month(df: pd.DataFrame, month: str | None) -> pd.DataFrame:
    if df.empty or not month or month == "All":
        return df
    return df[df["month"] == month]


@register_page("Auto Fetch Tasks")
def auto_fetch_page():
    st.title("Auto Fetch Tasks")
    st.caption("Issues you moved into code review or FT review, read-only from Redmine.")
    service: TaskService | None = st.session_state.get("task_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return

    col_project, col_user = st.columns(2)
    project = col_project.text_input("Project name", value=st.session_state.get("project_name", ""))
    user = col_user.text_input("Username or user id", value=st.session_state.get("redmine_user", ""))
    col_fetch, col_refresh = st.columns(2)
    fetch = col_fetch.button("Fetch Tasks", type="primary")
    refresh = col_refresh.button("Force Refresh")

    if fetch or refresh:
        if not (project and user):
            st.error("Project name and user are required.")
            return
        st.session_state["project_name"] = project
        st.session_state["redmine_user"] = user
        reporter = ProgressReporter(f"Fetching tasks for {project}")
        try:
            tasks = service.fetch_user_tasks(project, user, progress=reporter.callback, refresh=refresh)
            st.session_state["tasks_df"] = tasks
            reporter.complete(f"Loaded {len(tasks)} task(s).")
        except Exception as exc:  # pragma: no cover
            reporter.error(f"Failed to fetch tasks: {exc}")
            return

    tasks = st.session_state.get("tasks_df", pd.DataFrame())
    if tasks.empty:
        st.info("No tasks loaded yet.")
        return

    month = st.selectbox("Month", ["All", *MONTH_NAMES])
    view = filter_by_month(tasks, month)
    server = st.session_state.get("redmine_server", "")
    prepared, display_cols, cfg = prepare_task_table(view, server)
    if prepared.empty:
        st.info("No tasks for the selected month.")
        return
    column_config = apply_column_metadata(display_cols, cfg)
    st.dataframe(
        prepared[display_cols].head(SETTINGS.max_table_rows),
        hide_index=True,
        column_config=column_config,
    )
    csv = prepared[display_cols].to_csv(index=False).encode(SETTINGS.download_encoding)
    st.download_button(
        "Download Tasks CSV",
        data=csv,
        file_name=f"redmine_tasks_{st.session_state.get('project_name', 'project')}.csv",
        mime="text/csv",
    )
