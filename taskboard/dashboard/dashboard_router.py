# taskboard/dashboard/dashboard_router.py

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from taskboard.auth.auth_router import get_current_user
from taskboard.dashboard import stats
from taskboard.database import get_db, utcnow
from taskboard.errors import store_error
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.schemas.dashboard_schema import AnalyticsRead, DashboardStatsRead

logger = logging.getLogger("taskboard.dashboard")

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _user_tasks(db: Session, user: User):
    return (
        db.query(Task)
        .options(selectinload(Task.project))
        .filter(Task.user_id == user.id)
        .all()
    )


@router.get("/stats", response_model=DashboardStatsRead)
def dashboard_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        tasks = _user_tasks(db, user)
        active_projects = (
            db.query(Project)
            .filter(Project.user_id == user.id, Project.is_archived.is_(False))
            .count()
        )
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "dashboard_stats_failed", user_id=user.id)

    result = stats.dashboard_stats(tasks, active_projects, utcnow())
    return DashboardStatsRead.model_validate(vars(result), from_attributes=True)


@router.get("/analytics", response_model=AnalyticsRead)
def dashboard_analytics(
    time_range: stats.TimeRange = stats.TimeRange.LAST_7_DAYS,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        tasks = _user_tasks(db, user)
        projects = (
            db.query(Project)
            .filter(Project.user_id == user.id)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise store_error(db, exc, "dashboard_analytics_failed", user_id=user.id)

    result = stats.analytics(tasks, projects, utcnow(), time_range.days)
    return AnalyticsRead.model_validate(
        {"time_range": time_range.value, **vars(result)},
        from_attributes=True,
    )
