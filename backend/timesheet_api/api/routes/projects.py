"""
Project management API routes.

Projects belong to one organization. Admins create, update and delete them;
staff only see the projects they are assigned to.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends

from ...auth.dependencies import get_current_user, get_current_admin_user, get_repositories, CurrentUser
from ...auth.permissions import require_same_org
from ...database.repositories import Repositories
from ...errors import NotFound, ValidationFailed
from ...schemas import StandardResponse
from ...schemas.project import ProjectCreateRequest, ProjectUpdateRequest, ProjectRecord, ProjectResponse
from ...utils import generate_id, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])

IMMUTABLE_FIELDS = ("id", "orgId", "createdAt", "createdBy")


def _load_project(repos: Repositories, current_user: CurrentUser, project_id: str):
    project = repos.projects.get(project_id)
    if project is None:
        raise NotFound("Project not found")
    require_same_org(current_user, project.get("orgId"))
    return project


# PUBLIC_INTERFACE
@router.post("", response_model=ProjectResponse,
            summary="Create project",
            description="Create a project in the caller's organization (admin only).")
async def create_project(
    request: ProjectCreateRequest,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    """
    Create a new project.

    The project is stored and appended to ``org-projects`` in one
    transaction.
    """
    if not current_user.org_id:
        raise ValidationFailed("User is not a member of an organization")

    project_id = generate_id("project")
    project = {
        "id": project_id,
        "name": request.name,
        "description": request.description,
        "orgId": current_user.org_id,
        "assignedUsers": request.assigned_users,
        "createdAt": utc_now_iso(),
        "createdBy": current_user.user_id,
    }
    with repos.transaction():
        repos.projects.set(project_id, project)
        repos.org_projects.append(current_user.org_id, project_id)

    logger.info(f"Project {project_id} created in organization {current_user.org_id}")
    return ProjectResponse(project=project)


# PUBLIC_INTERFACE
@router.get("", response_model=List[ProjectRecord],
           summary="List projects",
           description="Admins see every project of their organization; staff only those they are assigned to.")
async def list_projects(
    current_user: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories)
):
    if not current_user.org_id:
        return []

    projects = repos.projects.batch_get(repos.org_projects.list(current_user.org_id))
    if current_user.is_admin:
        return projects
    return [
        project for project in projects
        if current_user.user_id in (project.get("assignedUsers") or [])
    ]


# PUBLIC_INTERFACE
@router.put("/{project_id}", response_model=ProjectResponse,
           summary="Update project",
           description="Update a project's name, description or assignments (admin only).")
async def update_project(
    project_id: str,
    request: ProjectUpdateRequest,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    project = _load_project(repos, current_user, project_id)
    updated = {**project, **request.changes(nullable=("description",))}
    for name in IMMUTABLE_FIELDS:
        updated[name] = project.get(name)

    with repos.transaction():
        repos.projects.set(project_id, updated)
    return ProjectResponse(project=updated)


# PUBLIC_INTERFACE
@router.delete("/{project_id}", response_model=StandardResponse, response_model_exclude_none=True,
              summary="Delete project",
              description="Delete a project and drop it from the organization index (admin only).")
async def delete_project(
    project_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    """
    Delete a project.

    Timesheet entries that reference the project are kept.
    """
    project = _load_project(repos, current_user, project_id)
    with repos.transaction():
        repos.projects.delete(project_id)
        repos.org_projects.remove(project["orgId"], project_id)

    logger.info(f"Project {project_id} deleted by {current_user.user_id}")
    return StandardResponse()
