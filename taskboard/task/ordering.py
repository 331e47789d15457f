"""Task positions: where a new task goes and how a drag-and-drop order is saved."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from taskboard.models.task import Task

logger = logging.getLogger("taskboard.task.ordering")

# position first; equal positions fall back to newest first
ORDERING = (Task.position.asc(), Task.created_at.desc(), Task.id.desc())


def next_position(existing_positions: Iterable[Optional[int]]) -> int:
    """One past the highest position in the scope, 0 for an empty scope."""
    positions = [p for p in existing_positions if p is not None]
    if not positions:
        return 0
    return max(positions) + 1


def scope_clause(user_id: int, project_id: Optional[int]):
    # "no project" is a scope of its own
    if project_id is None:
        return (Task.user_id == user_id) & Task.project_id.is_(None)
    return (Task.user_id == user_id) & (Task.project_id == project_id)


def next_position_in_scope(db: Session, user_id: int, project_id: Optional[int]) -> int:
    positions = db.scalars(select(Task.position).where(scope_clause(user_id, project_id)))
    return next_position(positions)


def reorder(db: Session, user_id: int, task_ids: Sequence[int]) -> int:
    """
    Set position = index for each id, one committed write per task.

    Not atomic: if a write fails the earlier ones stay committed and the
    error propagates; the caller re-fetches to reconcile. Ids that are not
    the caller's tasks are skipped.
    """
    updated = 0
    for index, task_id in enumerate(task_ids):
        result = db.execute(
            update(Task)
            .where(Task.id == task_id, Task.user_id == user_id)
            .values(position=index)
            .execution_options(synchronize_session="fetch")
        )
        db.commit()
        updated += result.rowcount or 0

    logger.info("tasks_reordered", extra={"user_id": user_id, "requested": len(task_ids), "updated": updated})
    return updated
