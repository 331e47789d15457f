# taskboard/project/project_router.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskboard.auth.auth_router import get_current_user
from taskboard.config import DEFAULT_PROJECT_COLOR
from taskboard.database import get_db
from taskboard.errors import store_error
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.schemas.project_schema import ProjectCreate, ProjectRead, ProjectUpdate

logger = logging.getLogger("taskboard.project")

router = APIRouter(prefix="/api/projects", tags=["projects"])


def get_owned_project(db: Session, project_id: int, user: User) -> Project:
    project = db.query(Project).filter(Project.id == project_id, Project.user_id == user.id).first()
    if not project:
        raise HTTPException(404, "Project not found")
    return project


# ==========================
#  LIST PROJECTS
# ==========================
@router.get("", response_model=list[ProjectRead])
def list_projects(
    include_archived: bool = False,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    q = db.query(Project).filter(Project.user_id == user.id)
    if not include_archived:
        q = q.filter(Project.is_archived.is_(False))
    try:
        return q.order_by(Project.created_at.desc(), Project.id.desc()).all()
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "project_list_failed", user_id=user.id)


# ==========================
#  CREATE PROJECT
# ==========================
@router.post("", response_model=ProjectRead, status_code=201)
def create_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    name = (data.name or "").strip()
    if not name:
        raise HTTPException(400, "Project name is required")

    project = Project(
        user_id=user.id,
        name=name,
        description=data.description,
        color=data.color or DEFAULT_PROJECT_COLOR,
    )
    try:
        db.add(project)
        db.commit()
        db.refresh(project)
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "project_create_failed", user_id=user.id)

    logger.info("project_created", extra={"project_id": project.id})
    return project


# ==========================
#  GET PROJECT BY ID
# ==========================
@router.get("/{project_id}", response_model=ProjectRead)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_owned_project(db, project_id, user)


# ==========================
#  UPDATE PROJECT (PUT, partial)
# ==========================
@router.put("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    data: ProjectUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    project = get_owned_project(db, project_id, user)
    payload = data.model_dump(exclude_unset=True)

    # explicit null clears the description; null color / is_archived are ignored
    if "name" in payload:
        name = (payload["name"] or "").strip()
        if not name:
            raise HTTPException(400, "Project name is required")
        project.name = name
    if "description" in payload:
        project.description = payload["description"]
    if payload.get("color") is not None:
        project.color = payload["color"]
    if payload.get("is_archived") is not None:
        project.is_archived = payload["is_archived"]

    try:
        db.commit()
        db.refresh(project)
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "project_update_failed", project_id=project_id)
    return project


# ==========================
#  DELETE PROJECT
# ==========================
@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    project = get_owned_project(db, project_id, user)

    try:
        # tasks outlive their project
        detached = (
            db.query(Task)
            .filter(Task.project_id == project.id, Task.user_id == user.id)
            .update({Task.project_id: None}, synchronize_session="fetch")
        )
        db.delete(project)
        db.commit()
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "project_delete_failed", project_id=project_id)

    logger.info("project_deleted", extra={"project_id": project_id, "detached_tasks": detached})
    return {"message": "Project deleted successfully"}
