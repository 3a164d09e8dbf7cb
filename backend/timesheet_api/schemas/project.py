"""
Project schemas.
"""
from typing import List, Optional
from pydantic import Field

from . import CamelModel


class ProjectCreateRequest(CamelModel):
    """Project creation request schema."""
    name: str = Field(..., min_length=1, max_length=255, description="Project name")
    description: Optional[str] = Field("", description="Project description")
    assigned_users: List[str] = Field(default_factory=list, description="IDs of staff assigned to the project")


class ProjectUpdateRequest(CamelModel):
    """Project update request schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Project name")
    description: Optional[str] = Field(None, description="Project description")
    assigned_users: Optional[List[str]] = Field(None, description="IDs of staff assigned to the project")


class ProjectRecord(CamelModel):
    """Project record."""
    id: str
    name: str
    description: Optional[str] = None
    org_id: str
    assigned_users: List[str] = Field(default_factory=list)
    created_at: str
    created_by: str


class ProjectResponse(CamelModel):
    """Project mutation response."""
    success: bool = True
    project: ProjectRecord
