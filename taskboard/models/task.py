# taskboard/models/task.py

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship

from taskboard.database import Base, utcnow

TASK_STATUSES = ("todo", "in-progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")


class TaskTag(Base):
    __tablename__ = "task_tags"
    __table_args__ = (UniqueConstraint("task_id", "name", name="uq_task_tag"),)

    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)

    def __init__(self, name: str):
        self.name = name


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    status = Column(String, default="todo", nullable=False)      # todo / in-progress / completed
    priority = Column(String, default="medium", nullable=False)  # low / medium / high / urgent

    due_date = Column(DateTime, nullable=True, index=True)

    # minutes
    estimated_time = Column(Integer, nullable=True)
    actual_time = Column(Integer, nullable=True)

    position = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    project = relationship("Project", back_populates="tasks")
    tag_rows = relationship(
        "TaskTag",
        cascade="all, delete-orphan",
        order_by="TaskTag.id",
        lazy="selectin",
    )
    attachments = relationship(
        "Attachment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Attachment.created_at.desc()",
    )

    # list[str] view over tag_rows
    tags = association_proxy("tag_rows", "name")

    def set_tags(self, names) -> None:
        """Replace the tag set, dropping blanks and duplicates."""
        unique: list[str] = []
        for name in names or []:
            name = name.strip()
            if name and name not in unique:
                unique.append(name)
        # keep rows for tags that stay, so (task_id, name) is never inserted twice
        existing = {row.name: row for row in self.tag_rows}
        self.tag_rows = [existing.get(name) or TaskTag(name) for name in unique]
