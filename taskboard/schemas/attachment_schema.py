# taskboard/schemas/attachment_schema.py
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AttachmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    task_id: int
    user_id: int
    filename: str
    original_filename: str
    file_size: int
    mime_type: str
    file_path: str
    created_at: datetime
