"""Reusable table helpers for Streamlit rendering."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from tasktrack_app.core.column_config import get_columns


def add_issue_link(df: pd.DataFrame, server: str, id_col: str = "task_id", label: str = "Issue"):
    if df.empty or id_col not in df.columns:
        return df, {}
    out = df.copy()
    base = server.rstrip("/")
    out[label] = out[id_col].astype(str).apply(lambda i: f"{base}/issues/{i}" if i and i != "nan" else "")
    cfg = {
        label: st.column_config.LinkColumn(
            label,
            display_text=r"issues/(.*)$",
            help="Open in Redmine",
            width="small",
        )
    }
    return out, cfg


def prepare_task_table(
    df: pd.DataFrame,
    server: str,
    *,
    extra_columns: list[str] | None = None,
) -> tuple[pd.DataFrame, list[str], dict[str, object]]:
    if df.empty:
        return df, [], {}

    table, cfg = add_issue_link(df, server)
    canonical = get_columns("task_list") or []
    display_cols: list[str] = [col for col in canonical if col in table.columns]

    if extra_columns:
        for col in extra_columns:
            if col in table.columns and col not in display_cols:
                display_cols.append(col)

    if not display_cols:
        display_cols = [col for col in table.columns if col != "task_id"]

    return table, display_cols, cfg
