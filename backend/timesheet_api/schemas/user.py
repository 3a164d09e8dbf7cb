"""
User profile schemas.
"""
from typing import Literal, Optional
from pydantic import Field

from . import CamelModel


class UserProfileResponse(CamelModel):
    """Stored user record."""
    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User email address")
    name: str = Field(..., description="Display name")
    role: str = Field(..., description="admin or staff")
    org_id: Optional[str] = Field(None, description="Organization ID")
    created_at: str = Field(..., description="Creation timestamp")


class ProfileUpdateRequest(CamelModel):
    """Own-profile update request schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=200, description="Display name")


class UserUpdateRequest(CamelModel):
    """Admin user update request schema."""
    name: Optional[str] = Field(None, min_length=1, max_length=200, description="Display name")
    role: Optional[Literal["admin", "staff"]] = Field(None, description="User role")


class UserMutationResponse(CamelModel):
    """User update response."""
    success: bool = True
    user: UserProfileResponse
