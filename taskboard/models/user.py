# taskboard/models/user.py
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from taskboard.database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
