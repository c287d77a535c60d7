"""Domain data models for tracker-derived tasks and dashboard filters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(slots=True)
class TaskModel:
    task_id: str
    task_type: str
    description: str
    total_hours: float
    approved_hours: float
    project: str
    month: str
    status: str  # "todo" | "in-progress" | "done"
    note: str = ""
    completed: bool = False
    # Source date the month was derived from (None when it fell back to "now")
    date: date | None = None

    def __post_init__(self):
        self.completed = self.status == "done"


@dataclass(slots=True)
class DashboardFilters:
    date_range: str = "30d"  # "7d" | "30d" | "90d" | "1y" | "custom"
    projects: list[str] = field(default_factory=list)
    task_types: list[str] = field(default_factory=list)
    statuses: list[str] = field(default_factory=list)
    custom_date_range: tuple[datetime, datetime] | None = None


@dataclass(slots=True)
class ProductivityMetrics:
    total_tasks: int = 0
    completed_tasks: int = 0
    completion_rate: int = 0
    avg_completion_time: float = 0.0
    task_velocity: float = 0.0  # completed tasks per week
    productivity_score: int = 0  # 0-100
    most_productive_day: str = "Tuesday"
    estimation_accuracy: int = 0


@dataclass(slots=True)
class TrendPoint:
    period: str
    value: int
    change: int  # percent change from previous period
    trend: str  # "up" | "down" | "neutral"


@dataclass(slots=True)
class WorkloadMetrics:
    total_tasks: int
    total_approved_hours: float
    total_working_days: int
    total_working_hours: float
    total_leaves: int
    total_working_days_in_period: int
    effective_working_days: int
    productivity: float
    period: str
    year: int
