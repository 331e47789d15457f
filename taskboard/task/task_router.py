import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskboard.auth.auth_router import get_current_user
from taskboard.database import get_db, utcnow
from taskboard.errors import store_error
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.schemas.task_schema import (
    ReorderRequest,
    TaskCreate,
    TaskPriority,
    TaskRead,
    TaskStatus,
    TaskUpdate,
)
from taskboard.storage.file_storage import FileStorage, StorageError, get_storage
from taskboard.task import ordering
from taskboard.task.filters import DateFilter, TaskFilters, build_task_query

logger = logging.getLogger("taskboard.task")


# ==========================
#  ROUTER
# ==========================
router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


def get_owned_task(db: Session, task_id: int, user: User) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user.id).first()
    if not task:
        raise HTTPException(404, "Task not found")
    return task


def _check_project(db: Session, project_id: Optional[int], user: User) -> None:
    if project_id is None:
        return
    owned = db.query(Project.id).filter(Project.id == project_id, Project.user_id == user.id).first()
    if not owned:
        raise HTTPException(404, "Project not found")


@router.get("", response_model=list[TaskRead])
def list_tasks(
    project_id: Optional[int] = None,
    status: Optional[TaskStatus] = None,
    priority: Optional[TaskPriority] = None,
    search: Optional[str] = None,
    date_filter: Optional[DateFilter] = None,
    tag_filter: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    filters = TaskFilters(
        project_id=project_id,
        status=status,
        priority=priority,
        search=search,
        date_filter=date_filter,
        tag=tag_filter,
    )
    try:
        return db.scalars(build_task_query(user.id, filters, utcnow())).all()
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "task_list_failed", user_id=user.id)


@router.post("", response_model=TaskRead, status_code=201)
def create_task(
    data: TaskCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    title = (data.title or "").strip()
    if not title:
        raise HTTPException(400, "Task title is required")

    _check_project(db, data.project_id, user)

    try:
        # read-then-write, not locked: concurrent creates may share a position
        position = ordering.next_position_in_scope(db, user.id, data.project_id)

        task = Task(
            user_id=user.id,
            project_id=data.project_id,
            title=title,
            description=data.description,
            status=data.status.value,
            priority=data.priority.value,
            due_date=data.due_date,
            estimated_time=data.estimated_time,
            position=position,
        )
        task.set_tags(data.tags)
        db.add(task)
        db.commit()
        db.refresh(task)
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "task_create_failed", user_id=user.id)

    logger.info("task_created", extra={"task_id": task.id, "project_id": task.project_id, "position": position})
    return task


# declared before /{task_id} so "reorder" is not taken for an id
@router.put("/reorder")
def reorder_tasks(
    data: ReorderRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        ordering.reorder(db, user.id, data.task_ids)
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "task_reorder_failed", user_id=user.id)
    return {"message": "Tasks reordered successfully"}


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_owned_task(db, task_id, user)


@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    task = get_owned_task(db, task_id, user)
    payload = data.model_dump(exclude_unset=True)

    # title / status / priority / position are not nullable
    for key in ("status", "priority", "position"):
        if key in payload and payload[key] is None:
            del payload[key]
    if "title" in payload:
        payload["title"] = (payload["title"] or "").strip()
        if not payload["title"]:
            raise HTTPException(400, "Task title is required")
    if "project_id" in payload:
        _check_project(db, payload["project_id"], user)

    tags = payload.pop("tags", None)
    try:
        for key, value in payload.items():
            setattr(task, key, getattr(value, "value", value))
        if tags is not None:
            task.set_tags(tags)
        db.commit()
        db.refresh(task)
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "task_update_failed", task_id=task_id)

    return task


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    storage: FileStorage = Depends(get_storage),
):
    task = get_owned_task(db, task_id, user)

    paths = [a.file_path for a in task.attachments]

    try:
        db.delete(task)
        db.commit()
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "task_delete_failed", task_id=task_id)

    # records went with the task; stored bytes are cleaned up best-effort
    if paths:
        try:
            storage.remove(paths)
        except StorageError:
            logger.warning("task_attachment_cleanup_failed", extra={"task_id": task_id, "files": len(paths)})

    return {"message": "Task deleted successfully"}
