"""
Timesheet, photo upload and report schemas.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import Field

from . import CamelModel


class TimesheetCreateRequest(CamelModel):
    """Timesheet entry creation request schema."""
    project_id: str = Field(..., min_length=1, description="Project ID")
    task_name: str = Field(..., min_length=1, description="Task performed")
    start_time: datetime = Field(..., description="Start time")
    end_time: datetime = Field(..., description="End time")
    duration: Optional[int] = Field(None, description="Duration in minutes")
    notes: Optional[str] = Field(None, description="Free-form notes")
    before_photo_url: Optional[str] = Field(None, description="Signed URL of the before photo")
    after_photo_url: Optional[str] = Field(None, description="Signed URL of the after photo")


class TimesheetUpdateRequest(CamelModel):
    """Timesheet entry update request schema."""
    project_id: Optional[str] = Field(None, min_length=1, description="Project ID")
    task_name: Optional[str] = Field(None, min_length=1, description="Task performed")
    start_time: Optional[datetime] = Field(None, description="Start time")
    end_time: Optional[datetime] = Field(None, description="End time")
    notes: Optional[str] = Field(None, description="Free-form notes")
    before_photo_url: Optional[str] = Field(None, description="Signed URL of the before photo")
    after_photo_url: Optional[str] = Field(None, description="Signed URL of the after photo")


class TimesheetRecord(CamelModel):
    """Timesheet entry record."""
    id: str
    user_id: str
    project_id: str
    task_name: str
    start_time: str
    end_time: str
    duration: int
    notes: Optional[str] = None
    before_photo_url: Optional[str] = None
    after_photo_url: Optional[str] = None
    created_at: str


class TimesheetResponse(CamelModel):
    """Timesheet mutation response."""
    success: bool = True
    timesheet: TimesheetRecord


class PhotoUploadRequest(CamelModel):
    """Photo upload request schema."""
    photo_data: str = Field(..., min_length=1, description="Base64 image, optionally as a data URI")
    file_name: str = Field(..., min_length=1, max_length=255, description="Original file name")


class PhotoUploadResponse(CamelModel):
    """Photo upload response schema."""
    success: bool = True
    url: str = Field(..., description="Signed URL valid for one year")
    path: str = Field(..., description="Object path in the bucket")


class ReportSummary(CamelModel):
    """Organization timesheet totals."""
    total_minutes: float
    total_hours: float
    entry_count: int
    by_user: List[Dict[str, Any]]
    by_project: List[Dict[str, Any]]
