# taskboard/schemas/dashboard_schema.py
from datetime import date
from typing import Dict, List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taskboard.schemas.task_schema import TaskRead


class CamelModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class DashboardStatsRead(CamelModel):
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    overdue_tasks: int
    tasks_due_today: int
    total_projects: int
    completion_rate: int
    recent_tasks: List[TaskRead]


class ProjectBreakdownRead(CamelModel):
    project_id: int
    project_name: str
    project_color: str
    task_count: int
    completed_count: int


class ActivityDayRead(CamelModel):
    date: date
    created: int
    completed: int


class AnalyticsRead(CamelModel):
    time_range: str
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    overdue_tasks: int
    total_projects: int
    completion_rate: int
    average_completion_time: float
    tasks_by_priority: Dict[str, int]
    tasks_by_project: List[ProjectBreakdownRead]
    activity: List[ActivityDayRead]
