"""
Authentication dependencies for FastAPI endpoints.

Resolves the bearer credential to an identity, then loads the caller's
stored user record fresh on every request so role and organization checks
never rely on token claims.
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..database.connection import get_db
from ..database.kv_store import KVStore
from ..database.models import UserRole
from ..database.repositories import Repositories, Record
from ..errors import Unauthorized, NotFound
from .identity import Identity, IdentityProvider
from .permissions import require_admin

security = HTTPBearer(auto_error=False)


class CurrentUser:
    """Authenticated caller together with their stored user record."""

    def __init__(self, identity: Identity, profile: Record):
        self.identity = identity
        self.profile = profile
        self.user_id = identity.id
        self.org_id = profile.get("orgId")
        self.role = profile.get("role")
        self.is_admin = self.role == UserRole.ADMIN.value


# PUBLIC_INTERFACE
def get_store(db: Session = Depends(get_db)) -> KVStore:
    """Key-value store bound to the request's session."""
    return KVStore(db)


# PUBLIC_INTERFACE
def get_repositories(store: KVStore = Depends(get_store)) -> Repositories:
    """Entity repositories and indexes for the request."""
    return Repositories(store)


# PUBLIC_INTERFACE
def get_identity_provider(db: Session = Depends(get_db)) -> IdentityProvider:
    """Identity provider bound to the request's session."""
    return IdentityProvider(db)


# PUBLIC_INTERFACE
def verify_user(
    credentials: Optional[HTTPAuthorizationCredentials],
    provider: IdentityProvider
) -> Optional[Identity]:
    """
    Resolve an ``Authorization: Bearer`` credential.

    Args:
        credentials: Parsed authorization header, if any
        provider: Identity provider

    Returns:
        Optional[Identity]: The caller's identity, or None. Never raises.
    """
    if credentials is None or not credentials.credentials:
        return None
    try:
        return provider.get_user(credentials.credentials)
    except Exception:
        return None


# PUBLIC_INTERFACE
async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    provider: IdentityProvider = Depends(get_identity_provider)
) -> Identity:
    """
    Get the authenticated identity.

    Raises:
        Unauthorized: If the credential is missing or invalid
    """
    identity = verify_user(credentials, provider)
    if identity is None:
        raise Unauthorized()
    return identity


# PUBLIC_INTERFACE
async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    repos: Repositories = Depends(get_repositories)
) -> CurrentUser:
    """
    Get the authenticated caller with their stored profile.

    Raises:
        Unauthorized: If the credential is missing or invalid
        NotFound: If the identity has no user record
    """
    profile = repos.users.get(identity.id)
    if profile is None:
        raise NotFound("User profile not found")
    return CurrentUser(identity, profile)


# PUBLIC_INTERFACE
async def get_current_admin_user(
    current_user: CurrentUser = Depends(get_current_user)
) -> CurrentUser:
    """
    Get the current user and ensure they are an admin.

    Raises:
        Forbidden: If the caller is not an admin
    """
    require_admin(current_user)
    return current_user
