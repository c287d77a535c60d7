"""Working-day and leave based workload metrics.

Compares the hours logged on tasks against the working days available in a
month or fiscal quarter, after subtracting leave days.
"""

from __future__ import annotations

import calendar
import math
from collections.abc import Iterable
from datetime import date

import pandas as pd

from tasktrack_app.core.config import HOURS_PER_WORKING_DAY, MONTH_NAMES, QUARTER_MONTHS
from tasktrack_app.core.models import WorkloadMetrics

from .dates import resolve_today, to_date


def working_days_in_month(month: int, year: int) -> int:
    """Count Monday-Friday days in ``month`` (1-12) of ``year``."""
    days_in_month = calendar.monthrange(year, month)[1]
    return sum(1 for day in range(1, days_in_month + 1) if date(year, month, day).weekday() < 5)


def last_n_months(count: int, *, today: date | None = None) -> list[dict[str, object]]:
    """The last ``count`` months (including the current one), oldest first."""
    today = today or resolve_today()
    out = []
    for offset in range(count - 1, -1, -1):
        month_index = today.month - 1 - offset
        year = today.year + month_index // 12
        month = month_index % 12 + 1
        out.append({"month": month, "month_name": MONTH_NAMES[month - 1], "year": year})
    return out


def _count_leaves(leaves: Iterable, month: int, year: int) -> int:
    total = 0
    for value in leaves:
        day = to_date(value)
        if day is not None and day.year == year and day.month == month:
            total += 1
    return total


def _period_months(period: str | None, quarter_view: bool, today: date) -> tuple[str, list[int]]:
    if not period or period == "all":
        label = "All Quarters" if quarter_view else "All Months"
        return label, [today.month]
    if quarter_view:
        if period not in QUARTER_MONTHS:
            raise ValueError(f"Unknown quarter {period!r}")
        return period, [list(MONTH_NAMES).index(m) + 1 for m in QUARTER_MONTHS[period]]
    if period not in MONTH_NAMES:
        raise ValueError(f"Unknown month {period!r}")
    return period, [list(MONTH_NAMES).index(period) + 1]


def calculate_workload_metrics(
    df: pd.DataFrame,
    leaves: Iterable = (),
    period: str | None = None,
    *,
    quarter_view: bool = False,
    today: date | None = None,
) -> WorkloadMetrics:
    """Workload for ``period``: a month name, a quarter ("Q1".."Q4"), or all.

    ``df`` is expected to be filtered to the period already. "All" periods use
    the current month for working days and leaves. Productivity is not capped
    at 1.0.
    """
    today = today or resolve_today()
    label, months = _period_months(period, quarter_view, today)
    leaves = list(leaves)

    total_tasks = int(len(df))
    approved = float(df["approved_hours"].fillna(0).sum()) if total_tasks else 0.0
    hours = float(df["total_hours"].fillna(0).sum()) if total_tasks else 0.0

    working_days = sum(working_days_in_month(m, today.year) for m in months)
    total_leaves = sum(_count_leaves(leaves, m, today.year) for m in months)
    effective = max(0, working_days - total_leaves)
    worked_days = hours / HOURS_PER_WORKING_DAY

    return WorkloadMetrics(
        total_tasks=total_tasks,
        total_approved_hours=approved,
        total_working_days=math.ceil(worked_days),
        total_working_hours=hours,
        total_leaves=total_leaves,
        total_working_days_in_period=working_days,
        effective_working_days=effective,
        productivity=max(0.0, worked_days / effective) if effective > 0 else 0.0,
        period=label,
        year=today.year,
    )
