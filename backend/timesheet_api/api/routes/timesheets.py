"""
Timesheet entry API routes.

Every user manages only their own entries; admins read other members'
entries through the organization report routes.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from ...auth.dependencies import get_current_user, get_repositories, CurrentUser
from ...auth.permissions import require_owner
from ...database.repositories import Repositories
from ...errors import NotFound, ValidationFailed
from ...schemas import StandardResponse
from ...schemas.timesheet import (
    TimesheetCreateRequest, TimesheetUpdateRequest, TimesheetRecord, TimesheetResponse
)
from ...services import reports, timesheets

router = APIRouter(prefix="/timesheets", tags=["Timesheets"])

NULLABLE_FIELDS = ("notes", "beforePhotoUrl", "afterPhotoUrl")


def _load_own_timesheet(repos: Repositories, current_user: CurrentUser, timesheet_id: str):
    record = repos.timesheets.get(timesheet_id)
    if record is None:
        raise NotFound("Timesheet not found")
    require_owner(current_user, record)
    return record


def _require_org_project(repos: Repositories, current_user: CurrentUser, project_id: str) -> None:
    project = repos.projects.get(project_id)
    if project is None or not current_user.org_id or project.get("orgId") != current_user.org_id:
        raise NotFound("Project not found")


# PUBLIC_INTERFACE
@router.post("", response_model=TimesheetResponse,
            summary="Create timesheet entry",
            description="Log time against a project of the caller's organization.")
async def create_timesheet(
    request: TimesheetCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories)
):
    """
    Create a timesheet entry.

    ``duration`` is computed from start and end when omitted.
    """
    _require_org_project(repos, current_user, request.project_id)

    try:
        with repos.transaction():
            record = timesheets.create_timesheet(repos, current_user.user_id, request.changes())
    except timesheets.InvalidDuration as exc:
        raise ValidationFailed(str(exc))
    return TimesheetResponse(timesheet=record)


# PUBLIC_INTERFACE
@router.get("", response_model=List[TimesheetRecord],
           summary="List own timesheet entries",
           description="The caller's entries, optionally filtered by date range and project.")
async def list_timesheets(
    current_user: CurrentUser = Depends(get_current_user),
    start_date: Optional[str] = Query(None, alias="startDate", description="Earliest start time (inclusive)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Latest start time (inclusive)"),
    project_id: Optional[str] = Query(None, alias="projectId", description="Only entries of this project"),
    repos: Repositories = Depends(get_repositories)
):
    try:
        filters = reports.TimesheetFilters.from_query(start_date, end_date, project_id=project_id)
    except ValueError:
        raise ValidationFailed("Invalid date filter")
    return reports.apply_filters(reports.user_timesheets(repos, current_user.user_id), filters)


# PUBLIC_INTERFACE
@router.put("/{timesheet_id}", response_model=TimesheetResponse,
           summary="Update timesheet entry",
           description="Update one of the caller's entries; the duration is recomputed.")
async def update_timesheet(
    timesheet_id: str,
    request: TimesheetUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories)
):
    record = _load_own_timesheet(repos, current_user, timesheet_id)
    changes = request.changes(nullable=NULLABLE_FIELDS)
    if "projectId" in changes:
        _require_org_project(repos, current_user, changes["projectId"])
    try:
        with repos.transaction():
            updated = timesheets.update_timesheet(repos, record, changes)
    except timesheets.InvalidDuration as exc:
        raise ValidationFailed(str(exc))
    return TimesheetResponse(timesheet=updated)


# PUBLIC_INTERFACE
@router.delete("/{timesheet_id}", response_model=StandardResponse, response_model_exclude_none=True,
              summary="Delete timesheet entry",
              description="Delete one of the caller's entries and drop it from their index.")
async def delete_timesheet(
    timesheet_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories)
):
    record = _load_own_timesheet(repos, current_user, timesheet_id)
    with repos.transaction():
        timesheets.delete_timesheet(repos, record, owner_id=current_user.user_id)
    return StandardResponse()
