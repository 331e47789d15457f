# taskboard/models/project.py
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from taskboard.config import DEFAULT_PROJECT_COLOR
from taskboard.database import Base, utcnow


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)

    # owner
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    color = Column(String(16), default=DEFAULT_PROJECT_COLOR, nullable=False)
    is_archived = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # deleting a project detaches its tasks instead of deleting them
    tasks = relationship("Task", back_populates="project")
