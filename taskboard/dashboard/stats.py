"""Dashboard and analytics aggregation.

Everything here is a pure function of its arguments: the caller fetches the
rows (already scoped to one user) and passes `now` in. Rows only need the
attributes the ORM Task/Project models expose, so plain objects work too.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Sequence

from taskboard.models.task import TASK_PRIORITIES

COMPLETED = "completed"
IN_PROGRESS = "in-progress"
TODO = "todo"

RECENT_DAYS = 7
RECENT_LIMIT = 5


class TimeRange(str, Enum):
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"

    @property
    def days(self) -> int:
        return int(self.value[:-1])


@dataclass
class ProjectBreakdown:
    project_id: int
    project_name: str
    project_color: str
    task_count: int
    completed_count: int


@dataclass
class ActivityDay:
    date: date
    created: int
    completed: int


@dataclass
class DashboardStats:
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    overdue_tasks: int
    tasks_due_today: int
    total_projects: int
    completion_rate: int
    recent_tasks: List[Any] = field(default_factory=list)


@dataclass
class Analytics:
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    overdue_tasks: int
    total_projects: int
    completion_rate: int
    average_completion_time: float
    tasks_by_priority: Dict[str, int]
    tasks_by_project: List[ProjectBreakdown]
    activity: List[ActivityDay]


# -------------------------
# Building blocks
# -------------------------

def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def completion_rate(completed: int, total: int) -> int:
    """Percentage rounded half-up; 0 when there is nothing to complete."""
    if not total:
        return 0
    return int(math.floor(completed / total * 100 + 0.5))


def is_overdue(task, now: datetime) -> bool:
    """Due in the past and not completed (dashboard/analytics definition)."""
    return task.due_date is not None and task.due_date < now and task.status != COMPLETED


def is_due_today(task, now: datetime) -> bool:
    today = start_of_day(now)
    return (
        task.status != COMPLETED
        and task.due_date is not None
        and today <= task.due_date < today + timedelta(days=1)
    )


def count_status(tasks: Iterable, status: str) -> int:
    return sum(1 for t in tasks if t.status == status)


def tasks_in_window(tasks: Iterable, since: datetime) -> List:
    return [t for t in tasks if t.created_at >= since]


def priority_counts(tasks: Sequence) -> Dict[str, int]:
    counts = {priority: 0 for priority in TASK_PRIORITIES}
    for task in tasks:
        if task.priority in counts:
            counts[task.priority] += 1
    return counts


def project_breakdown(tasks: Sequence, projects: Sequence) -> List[ProjectBreakdown]:
    """Per-project totals in project order; projects without tasks are left out."""
    rows: List[ProjectBreakdown] = []
    for project in projects:
        own = [t for t in tasks if t.project_id == project.id]
        if not own:
            continue
        rows.append(
            ProjectBreakdown(
                project_id=project.id,
                project_name=project.name,
                project_color=project.color,
                task_count=len(own),
                completed_count=count_status(own, COMPLETED),
            )
        )
    return rows


def _week_start(day: date) -> date:
    # weeks run Sunday..Saturday
    return day - timedelta(days=(day.weekday() + 1) % 7)


def daily_activity(tasks: Sequence, start: datetime, now: datetime) -> List[ActivityDay]:
    """
    Created/completed counts per day, from the Sunday on or before `start`
    to the Saturday on or after `now`.

    There is no completion timestamp, so a completed task is counted on the
    day it was last updated.
    """
    first = _week_start(start.date())
    last = _week_start(now.date()) + timedelta(days=6)

    created: Dict[date, int] = {}
    completed: Dict[date, int] = {}
    for task in tasks:
        day = task.created_at.date()
        created[day] = created.get(day, 0) + 1
        if task.status == COMPLETED and task.updated_at is not None:
            day = task.updated_at.date()
            completed[day] = completed.get(day, 0) + 1

    days: List[ActivityDay] = []
    current = first
    while current <= last:
        days.append(ActivityDay(current, created.get(current, 0), completed.get(current, 0)))
        current += timedelta(days=1)
    return days


def average_completion_time(tasks: Sequence) -> float:
    """Mean actual_time (minutes) of completed tasks that recorded one."""
    timed = [t.actual_time for t in tasks if t.status == COMPLETED and t.actual_time]
    if not timed:
        return 0
    return sum(timed) / len(timed)


# -------------------------
# Aggregates
# -------------------------

def dashboard_stats(tasks: Sequence, active_projects: int, now: datetime) -> DashboardStats:
    total = len(tasks)
    completed = count_status(tasks, COMPLETED)

    since = now - timedelta(days=RECENT_DAYS)
    recent = sorted(
        tasks_in_window(tasks, since),
        key=lambda t: (t.created_at, t.id),
        reverse=True,
    )[:RECENT_LIMIT]

    return DashboardStats(
        total_tasks=total,
        completed_tasks=completed,
        in_progress_tasks=count_status(tasks, IN_PROGRESS),
        overdue_tasks=sum(1 for t in tasks if is_overdue(t, now)),
        tasks_due_today=sum(1 for t in tasks if is_due_today(t, now)),
        total_projects=active_projects,
        completion_rate=completion_rate(completed, total),
        recent_tasks=recent,
    )


def analytics(
    tasks: Sequence,
    projects: Sequence,
    now: datetime,
    days: int,
) -> Analytics:
    start = now - timedelta(days=days)
    scoped = tasks_in_window(tasks, start)
    completed = count_status(scoped, COMPLETED)

    return Analytics(
        total_tasks=len(scoped),
        completed_tasks=completed,
        in_progress_tasks=count_status(scoped, IN_PROGRESS),
        todo_tasks=count_status(scoped, TODO),
        overdue_tasks=sum(1 for t in scoped if is_overdue(t, now)),
        total_projects=len(projects),
        completion_rate=completion_rate(completed, len(scoped)),
        average_completion_time=average_completion_time(scoped),
        tasks_by_priority=priority_counts(scoped),
        tasks_by_project=project_breakdown(scoped, projects),
        activity=daily_activity(scoped, start, now),
    )
