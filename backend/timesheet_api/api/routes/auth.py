"""
Authentication API routes.

Public endpoints for sign-up, sign-in and invite code verification. Sign-up
creates the identity, then either redeems an invite code, founds a new
organization, or leaves the user unassigned.
"""
import logging
from typing import Optional, Tuple
from fastapi import APIRouter, Depends

from ...auth.dependencies import get_identity_provider, get_repositories
from ...auth.identity import Identity, IdentityError, IdentityProvider
from ...database.models import UserRole
from ...database.repositories import Repositories
from ...errors import Unauthorized, ValidationFailed
from ...schemas.auth import (
    SignupRequest, SignupResponse, LoginRequest, LoginResponse,
    VerifyInviteCodeRequest, InviteCodeVerification
)
from ...services import invite_codes
from ...utils import generate_id, utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


def _discard_identity(provider: IdentityProvider, user_id: str) -> None:
    try:
        provider.delete_user(user_id)
    except IdentityError as exc:
        logger.error(f"Failed to remove identity {user_id} after aborted signup: {exc}")


def _place_user(repos: Repositories, identity: Identity, request: SignupRequest) -> Tuple[Optional[str], str]:
    """Redeem an invite code or found an organization; returns (orgId, role)."""
    if request.invite_code:
        code = invite_codes.redeem(repos, request.invite_code)
        return code["orgId"], UserRole.STAFF.value

    if request.organization_name:
        org_id = generate_id("org")
        repos.organizations.set(org_id, {
            "id": org_id,
            "name": request.organization_name,
            "createdAt": utc_now_iso(),
            "createdBy": identity.id,
        })
        logger.info(f"Organization {org_id} created by {identity.id}")
        return org_id, UserRole.ADMIN.value

    return None, request.role


# PUBLIC_INTERFACE
@router.post("/signup", response_model=SignupResponse,
            summary="Sign up",
            description="Create an account and either join an organization by invite code or found a new one.")
async def signup(
    request: SignupRequest,
    repos: Repositories = Depends(get_repositories),
    provider: IdentityProvider = Depends(get_identity_provider)
):
    """
    Register a new user.

    Users joining with an invite code are always staff; users founding an
    organization become its admin. A rejected invite code removes the
    identity that was just created.
    """
    try:
        identity = provider.create_user(request.email, request.password, {"name": request.name})
    except IdentityError as exc:
        logger.warning(f"Signup rejected for {request.email}: {exc}")
        raise ValidationFailed(str(exc))

    try:
        with repos.transaction():
            org_id, role = _place_user(repos, identity, request)
            repos.users.set(identity.id, {
                "id": identity.id,
                "email": identity.email,
                "name": request.name,
                "role": role,
                "orgId": org_id,
                "createdAt": utc_now_iso(),
            })
            if org_id:
                repos.user_org.set(identity.id, org_id)
                repos.org_users.append(org_id, identity.id)
    except invite_codes.InviteCodeRejected as exc:
        logger.info(f"Signup for {request.email} used an unusable invite code")
        _discard_identity(provider, identity.id)
        raise ValidationFailed(exc.reason)
    except Exception:
        logger.error(f"Signup for {request.email} failed, removing identity {identity.id}")
        _discard_identity(provider, identity.id)
        raise

    logger.info(f"User {identity.id} signed up as {role} in organization {org_id}")
    return SignupResponse(user_id=identity.id, org_id=org_id)


# PUBLIC_INTERFACE
@router.post("/login", response_model=LoginResponse,
            summary="Sign in",
            description="Exchange email and password for a bearer token.")
async def login(
    request: LoginRequest,
    provider: IdentityProvider = Depends(get_identity_provider)
):
    try:
        access_token = provider.sign_in(request.email, request.password)
    except IdentityError as exc:
        raise Unauthorized(str(exc))

    identity = provider.get_user(access_token)
    return LoginResponse(access_token=access_token, user_id=identity.id)


def _verify(repos: Repositories, code: Optional[str], strict: bool) -> InviteCodeVerification:
    if not code:
        return InviteCodeVerification(valid=False, error="No invite code provided")

    matches = repos.invite_codes.find_by_code(code)
    if not matches:
        if not strict:
            return InviteCodeVerification(valid=False, error=invite_codes.INVALID_CODE)
        if not repos.invite_codes.scan():
            return InviteCodeVerification(valid=False, error=invite_codes.NO_CODES_IN_SYSTEM)
        return InviteCodeVerification(valid=False, error=invite_codes.INVALID_OR_EXPIRED)

    record = next((match for match in matches if invite_codes.is_redeemable(match)), None)
    if record is None:
        reason = invite_codes.INVALID_OR_EXPIRED if strict else invite_codes.rejection_reason(matches[0])
        return InviteCodeVerification(valid=False, error=reason)

    organization = repos.organizations.get(record["orgId"])
    if organization is None:
        return InviteCodeVerification(valid=False, error="Organization not found")

    return InviteCodeVerification(
        valid=True,
        organization_name=organization["name"],
        organization_id=organization["id"]
    )


# PUBLIC_INTERFACE
@router.get("/verify-invite-code/{code}", response_model=InviteCodeVerification,
           response_model_exclude_none=True,
           summary="Check an invite code",
           description="Report whether an invite code can be redeemed and which organization it admits to.")
async def verify_invite_code(
    code: str,
    repos: Repositories = Depends(get_repositories)
):
    """
    Verify an invite code without consuming it.

    Failures name the first failing check: deactivated, expired, or out of uses.
    """
    return _verify(repos, code.strip(), strict=False)


# PUBLIC_INTERFACE
@router.post("/verify-invite-code", response_model=InviteCodeVerification,
            response_model_exclude_none=True,
            summary="Check an invite code (body)",
            description="Same check as the GET variant with the code in the request body.")
async def verify_invite_code_body(
    request: VerifyInviteCodeRequest,
    repos: Repositories = Depends(get_repositories)
):
    return _verify(repos, (request.code or "").strip(), strict=True)
