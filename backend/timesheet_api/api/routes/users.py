"""
User management API routes.

Provides the caller's own profile endpoints and admin update/delete of
organization members. Callers can never change their own role or
organization, and admins cannot delete themselves.
"""
import logging
from fastapi import APIRouter, Depends

from ...auth.dependencies import (
    get_current_user, get_current_admin_user, get_identity_provider, get_repositories, CurrentUser
)
from ...auth.identity import IdentityError, IdentityProvider
from ...auth.permissions import forbid_self_delete, require_same_org, restore_protected_fields
from ...database.repositories import Repositories
from ...errors import NotFound
from ...schemas import StandardResponse
from ...schemas.user import (
    UserProfileResponse, ProfileUpdateRequest, UserUpdateRequest, UserMutationResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserProfileResponse,
           summary="Get own profile",
           description="Get the current user's stored profile.")
async def get_own_profile(
    current_user: CurrentUser = Depends(get_current_user)
):
    return current_user.profile


# PUBLIC_INTERFACE
@router.put("/me", response_model=UserMutationResponse,
           summary="Update own profile",
           description="Update the current user's profile. Role and organization cannot be changed here.")
async def update_own_profile(
    request: ProfileUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories)
):
    """
    Update own profile.

    The update is merged over the stored record, then ``id``, ``role`` and
    ``orgId`` are put back to their stored values.
    """
    stored = current_user.profile
    updated = restore_protected_fields(stored, {**stored, **request.changes()})
    with repos.transaction():
        repos.users.set(current_user.user_id, updated)
    return UserMutationResponse(user=updated)


# PUBLIC_INTERFACE
@router.put("/{user_id}", response_model=UserMutationResponse,
           summary="Update user",
           description="Update a member's name or role (admin only).")
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories)
):
    """
    Update an organization member.

    Admins may change other members' roles but not their own.
    """
    target = repos.users.get(user_id)
    if target is None:
        raise NotFound("User not found")
    require_same_org(current_user, target.get("orgId"))

    protected = ("id", "orgId")
    if user_id == current_user.user_id:
        protected = ("id", "role", "orgId")
    updated = restore_protected_fields(target, {**target, **request.changes()}, protected)

    with repos.transaction():
        repos.users.set(user_id, updated)
    logger.info(f"User {user_id} updated by {current_user.user_id}")
    return UserMutationResponse(user=updated)


# PUBLIC_INTERFACE
@router.delete("/{user_id}", response_model=StandardResponse,
              summary="Delete user",
              description="Delete a member, their organization membership and their identity (admin only).")
async def delete_user(
    user_id: str,
    current_user: CurrentUser = Depends(get_current_admin_user),
    repos: Repositories = Depends(get_repositories),
    provider: IdentityProvider = Depends(get_identity_provider)
):
    """
    Delete a user.

    The user record, ``org-users`` entry and ``user-org`` mapping go in one
    transaction; the identity is removed afterwards and a failure there is
    only logged.
    """
    forbid_self_delete(current_user, user_id)

    target = repos.users.get(user_id)
    if target is None:
        raise NotFound("User not found")
    require_same_org(current_user, target.get("orgId"))

    with repos.transaction():
        repos.store.mdelete([repos.users.key(user_id), repos.user_org.key(user_id)])
        if target.get("orgId"):
            repos.org_users.remove(target["orgId"], user_id)

    try:
        provider.delete_user(user_id)
    except IdentityError as exc:
        logger.error(f"Error deleting identity {user_id}: {exc}")

    logger.info(f"User {user_id} deleted by {current_user.user_id}")
    return StandardResponse(message="User deleted successfully")
