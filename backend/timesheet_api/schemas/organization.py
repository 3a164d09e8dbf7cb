"""
Organization and invite code schemas.
"""
from typing import Optional
from pydantic import Field

from . import CamelModel


class OrganizationResponse(CamelModel):
    """Organization record."""
    id: str = Field(..., description="Organization ID")
    name: str = Field(..., description="Organization name")
    created_at: str = Field(..., description="Creation timestamp")
    created_by: str = Field(..., description="ID of the founding admin")


class InviteCodeCreateRequest(CamelModel):
    """Invite code creation request schema."""
    expires_in_days: Optional[int] = Field(None, description="Days until the code expires")
    max_uses: Optional[int] = Field(None, ge=0, description="Maximum number of redemptions")


class InviteCodeRecord(CamelModel):
    """Invite code record."""
    id: str
    code: str
    org_id: str
    created_by: str
    created_at: str
    expires_at: Optional[str] = None
    max_uses: Optional[int] = None
    current_uses: int = 0
    is_active: bool = True


class InviteCodeResponse(CamelModel):
    """Invite code mutation response."""
    success: bool = True
    invite_code: InviteCodeRecord
