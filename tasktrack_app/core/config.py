"""Central configuration, constants, feature flags, and shared column definitions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# =============================================================================
# Redmine Connection Settings
# =============================================================================
REDMINE_API_KEY_HEADER = "X-Redmine-API-Key"
REQUEST_TIMEOUT_SECONDS: float = 30.0

# Completed (and pending) responses live this long in the client cache
CACHE_TTL_SECONDS: float = 300.0

# Dashboard "today" is resolved in this timezone
TIMEZONE = "UTC"

# =============================================================================
# Pagination / Fan-out Tuning
# =============================================================================
ISSUES_PAGE_SIZE: int = 100
MAX_PROJECT_ISSUES: int = 500  # hard cap on accumulated issues per project fetch

# Journal hydration runs one thread per issue within a batch, then sleeps
# before the next batch so the tracker is not flooded.
JOURNAL_BATCH_SIZE: int = 80
JOURNAL_BATCH_DELAY_MS: int = 1000

# Fallback user lookup scans the authors of this many recent issues
USER_LOOKUP_RECENT_ISSUES: int = 100


# =============================================================================
# Workflow Status Transition Rules
# =============================================================================
@dataclass(frozen=True, slots=True)
class StatusTransitionRule:
    """Two ordered status checkpoints a user must move an issue through.

    IDs are specific to one tracker's workflow configuration; point the
    client at a differently configured instance and these must change.
    """

    name: str
    first_status_id: str
    second_status_id: str


CODE_REVIEW_RULE = StatusTransitionRule("code_review", first_status_id="7", second_status_id="16")
FT_REVIEW_RULE = StatusTransitionRule("ft_review", first_status_id="2", second_status_id="11")

DEFAULT_TRANSITION_RULES: dict[str, StatusTransitionRule] = {
    CODE_REVIEW_RULE.name: CODE_REVIEW_RULE,
    FT_REVIEW_RULE.name: FT_REVIEW_RULE,
}

# =============================================================================
# Task Status Configuration
# =============================================================================
TASK_STATUSES: Sequence[str] = ("todo", "in-progress", "done")

# Substring heuristics used only when the tracker omits status.is_closed
DONE_STATUS_HINTS: Sequence[str] = ("done", "closed")
IN_PROGRESS_STATUS_HINTS: Sequence[str] = ("progress", "development", "review")

# =============================================================================
# Redmine Custom Fields
# =============================================================================
APPROVED_HOURS_FIELD_NAME = "Approved hours"
APPROVED_HOURS_FIELD_ID = 21
DEFAULT_TASK_TYPE = "Task"

# =============================================================================
# Analytics Settings
# =============================================================================
DATE_RANGE_DAYS: dict[str, int] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "1y": 365,
}
DEFAULT_DATE_RANGE = "30d"
DEFAULT_DATE_RANGE_DAYS: int = 30

MONTH_NAMES: Sequence[str] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Fiscal quarters as used by the workload view (year starts in April)
QUARTER_MONTHS: dict[str, Sequence[str]] = {
    "Q1": ("April", "May", "June"),
    "Q2": ("July", "August", "September"),
    "Q3": ("October", "November", "December"),
    "Q4": ("January", "February", "March"),
}

HOURS_PER_WORKING_DAY: float = 8.0
VELOCITY_WEEKS: int = 4  # completed tasks are spread over a fixed four-week window
TREND_PERIODS: Sequence[str] = ("Week 1", "Week 2", "Week 3", "Week 4")
TREND_CHANGE_THRESHOLD: int = 5  # percent change needed to call a trend up/down

TASK_CORE_COLUMNS: Sequence[str] = (
    "task_id",
    "task_type",
    "description",
    "total_hours",
    "approved_hours",
    "project",
    "month",
    "note",
    "status",
    "completed",
    "date",
)

DISPLAY_ORDER_TASK_LIST: Sequence[str] = (
    "Issue",
    "description",
    "task_type",
    "project",
    "status",
    "total_hours",
    "approved_hours",
    "month",
    "note",
)

DISPLAY_ORDER_TIME_ANALYTICS: Sequence[str] = (
    "project",
    "task_type",
    "estimated_hours",
    "actual_hours",
    "accuracy",
    "variance",
)

DISPLAY_ORDER_PROJECT_PROGRESS: Sequence[str] = (
    "project",
    "total_tasks",
    "completed_tasks",
    "in_progress_tasks",
    "todo_tasks",
    "completion_percentage",
    "avg_completion_time",
    "overdue_tasks",
)


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000
    download_encoding: str = "utf-8"


SETTINGS = AppSettings()
