"""
Organization API routes.

Organization details, member listing, and the admin timesheet reports
(listing, totals and CSV export) for one organization.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response

from ...auth.dependencies import get_current_user, get_current_admin_user, get_repositories, CurrentUser
from ...auth.permissions import require_org_admin, require_same_org
from ...database.repositories import Repositories
from ...errors import NotFound, ValidationFailed
from ...schemas.organization import OrganizationResponse
from ...schemas.timesheet import ReportSummary, TimesheetRecord
from ...schemas.user import UserProfileResponse
from ...services import reports
from ...utils import utc_now

router = APIRouter(prefix="/organizations", tags=["Organizations"])


class ReportQuery:
    """Query parameters shared by the organization timesheet reports."""

    def __init__(
        self,
        start_date: Optional[str] = Query(None, alias="startDate", description="Earliest start time (inclusive)"),
        end_date: Optional[str] = Query(None, alias="endDate", description="Latest start time (inclusive)"),
        user_id: Optional[str] = Query(None, alias="userId", description="Only entries of this user"),
        project_id: Optional[str] = Query(None, alias="projectId", description="Only entries of this project"),
    ):
        try:
            self.filters = reports.TimesheetFilters.from_query(start_date, end_date, user_id, project_id)
        except ValueError:
            raise ValidationFailed("Invalid date filter")


# PUBLIC_INTERFACE
@router.get("/{org_id}", response_model=OrganizationResponse,
           summary="Get organization",
           description="Get the caller's organization.")
async def get_organization(
    org_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories)
):
    require_same_org(current_user, org_id)
    organization = repos.organizations.get(org_id)
    if organization is None:
        raise NotFound("Organization not found")
    return organization


# PUBLIC_INTERFACE
@router.get("/{org_id}/users", response_model=List[UserProfileResponse],
           summary="List organization users",
           description="List every member of the organization (admin of that organization only).")
async def list_organization_users(
    org_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    require_org_admin(current_user, org_id)
    return repos.users.batch_get(repos.org_users.list(org_id))


# PUBLIC_INTERFACE
@router.get("/{org_id}/timesheets", response_model=List[TimesheetRecord],
           summary="List organization timesheets",
           description="Every member's timesheet entries, filtered by date range, user and project (admin only).")
async def list_organization_timesheets(
    org_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    query: ReportQuery = Depends(),
    repos: Repositories = Depends(get_repositories)
):
    """
    List organization timesheets.

    Walks every member's timesheet index; dates filter on ``startTime``.
    """
    require_org_admin(current_user, org_id)
    return reports.organization_timesheets(repos, org_id, query.filters)


# PUBLIC_INTERFACE
@router.get("/{org_id}/reports/summary", response_model=ReportSummary,
           summary="Summarize organization timesheets",
           description="Total hours with per-user and per-project breakdowns (admin only).")
async def summarize_organization_timesheets(
    org_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    query: ReportQuery = Depends(),
    repos: Repositories = Depends(get_repositories)
):
    require_org_admin(current_user, org_id)
    entries = reports.organization_timesheets(repos, org_id, query.filters)
    return reports.summarize(repos, org_id, entries)


# PUBLIC_INTERFACE
@router.get("/{org_id}/timesheets/export",
           summary="Export organization timesheets",
           description="Filtered organization timesheets as a CSV download (admin only).",
           response_class=Response,
           responses={200: {"content": {"text/csv": {}}}})
async def export_organization_timesheets(
    org_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    query: ReportQuery = Depends(),
    repos: Repositories = Depends(get_repositories)
):
    require_org_admin(current_user, org_id)
    entries = reports.organization_timesheets(repos, org_id, query.filters)
    filename = f"timesheet-report-{utc_now().date().isoformat()}.csv"
    return Response(
        content=reports.export_csv(repos, org_id, entries),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )
