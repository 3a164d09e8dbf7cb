"""
Per-route authorization rules.

Every rule is a predicate against the caller's stored user record; a
failing rule raises the matching API error.
"""
from typing import Any, Dict, Optional

from ..errors import Forbidden, ValidationFailed

PROTECTED_PROFILE_FIELDS = ("id", "role", "orgId")


def require_admin(current_user) -> None:
    """Caller must hold the admin role."""
    if not current_user.is_admin:
        raise Forbidden("Forbidden - Admin only")


def require_same_org(current_user, org_id: Optional[str]) -> None:
    """The organization in question must be the caller's own."""
    if not current_user.org_id or org_id != current_user.org_id:
        raise Forbidden("Forbidden")


def require_org_admin(current_user, org_id: Optional[str]) -> None:
    """Admin of the given organization."""
    if not current_user.is_admin or not current_user.org_id or org_id != current_user.org_id:
        raise Forbidden("Forbidden")


def require_owner(current_user, record: Dict[str, Any]) -> None:
    """The record must belong to the caller."""
    if record.get("userId") != current_user.user_id:
        raise Forbidden("Forbidden")


def forbid_self_delete(current_user, target_user_id: str) -> None:
    if target_user_id == current_user.user_id:
        raise ValidationFailed("Cannot delete your own account")


def restore_protected_fields(stored: Dict[str, Any], merged: Dict[str, Any], fields=PROTECTED_PROFILE_FIELDS) -> Dict[str, Any]:
    """
    Force selected fields of a merged update back to their stored values.

    Args:
        stored: Record as currently stored
        merged: Record after applying the caller's changes
        fields: Field names the caller may not change

    Returns:
        The merged record with ``fields`` restored
    """
    for name in fields:
        merged[name] = stored.get(name)
    return merged
