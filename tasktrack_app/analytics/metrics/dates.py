"""Task date derivation and date-range helpers (pure functions)."""

from __future__ import annotations

import calendar
from datetime import date, datetime

import pandas as pd
import pytz

from tasktrack_app.core.config import DATE_RANGE_DAYS, DEFAULT_DATE_RANGE_DAYS, MONTH_NAMES, TIMEZONE


def resolve_today(now: datetime | date | None = None) -> date:
    """Normalize an injected ``now`` to a date; defaults to today in TIMEZONE."""
    if now is None:
        return datetime.now(pytz.timezone(TIMEZONE)).date()
    if isinstance(now, datetime):
        return now.date()
    return now


def days_from_range(date_range: str | None) -> int:
    return DATE_RANGE_DAYS.get(date_range or "", DEFAULT_DATE_RANGE_DAYS)


def to_date(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    ts = pd.to_datetime(value, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def month_end(month: str | None, today: date) -> date:
    """Last day of ``month`` in today's year, never later than today.

    Unknown month names resolve to today.
    """
    try:
        index = list(MONTH_NAMES).index(str(month)) + 1
    except ValueError:
        return today
    last_day = calendar.monthrange(today.year, index)[1]
    return min(date(today.year, index, last_day), today)


def task_date(source_date, month: str | None, today: date) -> date:
    return to_date(source_date) or month_end(month, today)


def derive_task_dates(df: pd.DataFrame, *, today: date) -> pd.Series:
    """Datetime series (midnight-normalized) of each task's derived date."""
    if df.empty:
        return pd.Series(pd.to_datetime([]), index=df.index)
    sources = df["date"] if "date" in df.columns else pd.Series([None] * len(df), index=df.index)
    months = df["month"] if "month" in df.columns else pd.Series([None] * len(df), index=df.index)
    derived = [task_date(d, m, today) for d, m in zip(sources, months)]
    return pd.Series(pd.to_datetime(derived), index=df.index)
