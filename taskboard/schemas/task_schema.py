# taskboard/schemas/task_schema.py

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from taskboard.schemas.common import to_naive_utc
from taskboard.schemas.project_schema import ProjectSummary


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# --------- Base schema (common fields) ----------
class TaskBase(BaseModel):
    description: Optional[str] = None
    project_id: Optional[int] = None
    due_date: Optional[datetime] = None
    estimated_time: Optional[int] = Field(default=None, ge=0)   # minutes

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value):
        return to_naive_utc(value)


# --------- For CREATE ----------
class TaskCreate(TaskBase):
    # required, checked in the handler (400 "Task title is required")
    title: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: List[str] = Field(default_factory=list)


# --------- For UPDATE (PUT, partial) ----------
class TaskUpdate(TaskBase):
    title: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    actual_time: Optional[int] = Field(default=None, ge=0)
    tags: Optional[List[str]] = None
    position: Optional[int] = None


class ReorderRequest(BaseModel):
    task_ids: List[int] = Field(validation_alias=AliasChoices("task_ids", "taskIds"))


# --------- For READ (responses) ----------
class TaskRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    project_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    estimated_time: Optional[int] = None
    actual_time: Optional[int] = None
    position: int
    tags: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None

    project: Optional[ProjectSummary] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_list(cls, value):
        # association proxy -> plain list
        return list(value or [])
