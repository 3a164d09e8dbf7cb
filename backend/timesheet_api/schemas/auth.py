"""
Sign-up, sign-in and invite verification schemas.
"""
from typing import Literal, Optional
from pydantic import EmailStr, Field

from . import CamelModel


class SignupRequest(CamelModel):
    """Sign-up request schema."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    organization_name: Optional[str] = Field(None, max_length=255, description="Name of a new organization to create")
    invite_code: Optional[str] = Field(None, description="Invite code of an existing organization")
    role: Literal["admin", "staff"] = Field("staff", description="Requested role when joining no organization")


class SignupResponse(CamelModel):
    """Sign-up response schema."""
    success: bool = True
    user_id: str = Field(..., description="New user ID")
    org_id: Optional[str] = Field(None, description="Organization the user belongs to")
    message: str = "User created successfully"


class LoginRequest(CamelModel):
    """Sign-in request schema."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class LoginResponse(CamelModel):
    """Sign-in response schema."""
    access_token: str = Field(..., description="Bearer token")
    token_type: str = "bearer"
    user_id: str = Field(..., description="User ID")


class VerifyInviteCodeRequest(CamelModel):
    """Invite code verification request schema."""
    code: Optional[str] = Field(None, description="Invite code to check")


class InviteCodeVerification(CamelModel):
    """Result of checking an invite code."""
    valid: bool
    organization_name: Optional[str] = None
    organization_id: Optional[str] = None
    error: Optional[str] = None
