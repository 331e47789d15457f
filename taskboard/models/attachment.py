# taskboard/models/attachment.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from taskboard.database import Base, utcnow


class Attachment(Base):
    __tablename__ = "file_attachments"

    id = Column(Integer, primary_key=True, index=True)

    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # generated name (uuid + extension), unique across the bucket
    filename = Column(String, nullable=False, unique=True, index=True)
    original_filename = Column(String, nullable=False)

    file_size = Column(Integer, nullable=False)
    mime_type = Column(String, nullable=False, default="application/octet-stream")

    # path inside the storage bucket: {user_id}/{task_id}/{filename}
    file_path = Column(String, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    task = relationship("Task", back_populates="attachments")
