# taskboard/schemas/project_schema.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --------- Base schema (common fields) ---------
class ProjectBase(BaseModel):
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9a-fA-F]{3,8}$")


# --------- For creating a project (POST) ---------
class ProjectCreate(ProjectBase):
    # required, but checked in the handler so a missing name is a 400 with a clear message
    name: Optional[str] = None


# --------- For updating a project (PUT) ---------
class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9a-fA-F]{3,8}$")
    is_archived: Optional[bool] = None


# --------- Embedded in task responses ---------
class ProjectSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str


# --------- For reading a project (GET responses) ---------
class ProjectRead(ProjectBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    color: str
    is_archived: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
