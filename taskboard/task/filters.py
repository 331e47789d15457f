"""Task list filters: query parameters -> SQLAlchemy WHERE clauses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.orm import selectinload

from taskboard.models.task import Task, TaskTag
from taskboard.task.ordering import ORDERING


class DateFilter(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    NEXT_WEEK = "next_week"
    THIS_MONTH = "this_month"
    OVERDUE = "overdue"
    NO_DUE_DATE = "no_due_date"


# keyword -> (offset of start, length) in days from the start of today
_RANGES = {
    DateFilter.TODAY: (0, 1),
    DateFilter.TOMORROW: (1, 1),
    DateFilter.THIS_WEEK: (0, 7),
    DateFilter.NEXT_WEEK: (7, 7),
    DateFilter.THIS_MONTH: (0, 30),
}


def date_range(keyword: DateFilter, now: datetime) -> Tuple[datetime, datetime]:
    """Half-open [start, end) due-date window for a range keyword."""
    keyword = DateFilter(keyword)
    if keyword not in _RANGES:
        raise ValueError(f"{keyword.value} is not a date range")
    offset, length = _RANGES[keyword]
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    start = today + timedelta(days=offset)
    return start, start + timedelta(days=length)


def date_clause(keyword: DateFilter, now: datetime):
    keyword = DateFilter(keyword)
    if keyword is DateFilter.NO_DUE_DATE:
        return Task.due_date.is_(None)
    if keyword is DateFilter.OVERDUE:
        # completed tasks count here; the dashboard overdue count leaves them out
        return Task.due_date < now
    start, end = date_range(keyword, now)
    return and_(Task.due_date >= start, Task.due_date < end)


@dataclass
class TaskFilters:
    project_id: Optional[int] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    search: Optional[str] = None
    date_filter: Optional[DateFilter] = None
    tag: Optional[str] = None

    def clauses(self, now: datetime) -> List:
        """One clause per active filter; empty values mean no constraint."""
        out: List = []
        if self.project_id is not None:
            out.append(Task.project_id == self.project_id)
        if self.status:
            out.append(Task.status == getattr(self.status, "value", self.status))
        if self.priority:
            out.append(Task.priority == getattr(self.priority, "value", self.priority))
        if self.search:
            out.append(
                or_(
                    Task.title.icontains(self.search, autoescape=True),
                    Task.description.icontains(self.search, autoescape=True),
                )
            )
        if self.date_filter:
            out.append(date_clause(self.date_filter, now))
        if self.tag:
            out.append(Task.tag_rows.any(TaskTag.name == self.tag))
        return out


def build_task_query(user_id: int, filters: TaskFilters, now: datetime) -> Select:
    """Caller-scoped task list, all filters ANDed, in read order."""
    return (
        select(Task)
        .options(selectinload(Task.project))
        .where(Task.user_id == user_id, *filters.clauses(now))
        .order_by(*ORDERING)
    )
