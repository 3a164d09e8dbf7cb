"""
Invite code management API routes.

Admins create, list, toggle and delete the codes that let new staff join
their organization.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends

from ...auth.dependencies import get_current_admin_user, get_repositories, CurrentUser
from ...auth.permissions import require_org_admin, require_same_org
from ...database.repositories import Repositories
from ...errors import NotFound, ValidationFailed
from ...schemas import StandardResponse
from ...schemas.organization import InviteCodeCreateRequest, InviteCodeRecord, InviteCodeResponse
from ...services import invite_codes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invite-codes", tags=["Invite Codes"])


def _load_own_code(repos: Repositories, current_user: CurrentUser, code_id: str):
    record = repos.invite_codes.get(code_id)
    if record is None:
        raise NotFound("Invite code not found")
    require_same_org(current_user, record.get("orgId"))
    return record


# PUBLIC_INTERFACE
@router.post("", response_model=InviteCodeResponse,
            summary="Create invite code",
            description="Generate an 8-character invite code for the caller's organization (admin only).")
async def create_invite_code(
    request: InviteCodeCreateRequest,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    """
    Create an invite code.

    ``expiresInDays`` sets an expiry relative to now; ``maxUses`` caps
    redemptions. Both are optional.
    """
    if not current_user.org_id:
        raise ValidationFailed("User is not a member of an organization")

    with repos.transaction():
        record = invite_codes.create_invite_code(
            repos,
            org_id=current_user.org_id,
            created_by=current_user.user_id,
            expires_in_days=request.expires_in_days,
            max_uses=request.max_uses,
        )
    return InviteCodeResponse(invite_code=record)


# PUBLIC_INTERFACE
@router.get("/{org_id}", response_model=List[InviteCodeRecord],
           summary="List invite codes",
           description="List the organization's invite codes (admin of that organization only).")
async def list_invite_codes(
    org_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    require_org_admin(current_user, org_id)
    return repos.invite_codes.batch_get(repos.org_invite_codes.list(org_id))


# PUBLIC_INTERFACE
@router.put("/{code_id}/toggle", response_model=InviteCodeResponse,
           summary="Toggle invite code",
           description="Activate or deactivate an invite code (admin only).")
async def toggle_invite_code(
    code_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    record = _load_own_code(repos, current_user, code_id)
    with repos.transaction():
        updated = invite_codes.toggle_active(repos, record)
    logger.info(f"Invite code {code_id} is now {'active' if updated['isActive'] else 'inactive'}")
    return InviteCodeResponse(invite_code=updated)


# PUBLIC_INTERFACE
@router.delete("/{code_id}", response_model=StandardResponse, response_model_exclude_none=True,
              summary="Delete invite code",
              description="Delete an invite code and drop it from the organization index (admin only).")
async def delete_invite_code(
    code_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    record = _load_own_code(repos, current_user, code_id)
    with repos.transaction():
        invite_codes.delete_invite_code(repos, record)
    logger.info(f"Invite code {code_id} deleted by {current_user.user_id}")
    return StandardResponse()
