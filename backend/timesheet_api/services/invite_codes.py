"""
Invite code lifecycle.

A code is created active with ``currentUses = 0`` and can be redeemed while
it is active, unexpired and below ``maxUses``. Exhausted, expired and
deactivated are all terminal for redemption and may overlap in storage.
"""
import logging
import secrets
import string
from datetime import datetime, timedelta
from typing import Optional

from ..database.repositories import Record, Repositories
from ..utils import generate_id, parse_timestamp, to_iso, utc_now

logger = logging.getLogger(__name__)

CODE_LENGTH = 8
CODE_ALPHABET = string.digits + string.ascii_uppercase
MAX_CODE_ATTEMPTS = 10
MAX_REDEEM_ATTEMPTS = 5

INVALID_CODE = "Invalid invite code"
DEACTIVATED = "This invite code has been deactivated"
EXPIRED = "This invite code has expired"
EXHAUSTED = "This invite code has reached its maximum number of uses"
INVALID_OR_EXPIRED = "Invalid or expired invite code"
NO_CODES_IN_SYSTEM = "No invite codes found in system"


class InviteCodeRejected(Exception):
    """Raised when a code cannot be redeemed."""

    def __init__(self, reason: str = INVALID_OR_EXPIRED):
        super().__init__(reason)
        self.reason = reason


def is_expired(record: Record, now: Optional[datetime] = None) -> bool:
    expires_at = record.get("expiresAt")
    if not expires_at:
        return False
    return parse_timestamp(expires_at) < (now or utc_now())


def is_exhausted(record: Record) -> bool:
    max_uses = record.get("maxUses")
    return bool(max_uses) and record.get("currentUses", 0) >= max_uses


# PUBLIC_INTERFACE
def rejection_reason(record: Record, now: Optional[datetime] = None) -> Optional[str]:
    """
    Why ``record`` cannot be redeemed, or None if it can.

    Checks run in the order inactive, expired, exhausted.
    """
    if record.get("isActive") is not True:
        return DEACTIVATED
    if is_expired(record, now):
        return EXPIRED
    if is_exhausted(record):
        return EXHAUSTED
    return None


def is_redeemable(record: Record, now: Optional[datetime] = None) -> bool:
    return rejection_reason(record, now) is None


def generate_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


# PUBLIC_INTERFACE
def create_invite_code(repos: Repositories, org_id: str, created_by: str,
                       expires_in_days: Optional[int] = None, max_uses: Optional[int] = None) -> Record:
    """
    Create an invite code and add it to the organization's index.

    Args:
        repos: Repositories for the request
        org_id: Organization the code admits users to
        created_by: Id of the admin creating it
        expires_in_days: Days until expiry; falsy or non-positive means never
        max_uses: Maximum redemptions; falsy means unlimited

    Returns:
        The stored invite code record
    """
    existing = {record.get("code") for record in repos.invite_codes.scan()}
    code = generate_code()
    for _ in range(MAX_CODE_ATTEMPTS):
        if code not in existing:
            break
        code = generate_code()

    now = utc_now()
    expires_at = None
    if expires_in_days and expires_in_days > 0:
        expires_at = to_iso(now + timedelta(days=expires_in_days))

    code_id = generate_id("code")
    record = {
        "id": code_id,
        "code": code,
        "orgId": org_id,
        "createdBy": created_by,
        "createdAt": to_iso(now),
        "expiresAt": expires_at,
        "maxUses": max_uses or None,
        "currentUses": 0,
        "isActive": True,
    }
    repos.invite_codes.set(code_id, record)
    repos.org_invite_codes.append(org_id, code_id)
    logger.info(f"Invite code {code_id} created for organization {org_id}")
    return record


# PUBLIC_INTERFACE
def find_redeemable(repos: Repositories, code: str, now: Optional[datetime] = None) -> Optional[Record]:
    """First stored record with this code that can still be redeemed."""
    for record in repos.invite_codes.find_by_code(code):
        if is_redeemable(record, now):
            return record
    return None


# PUBLIC_INTERFACE
def redeem(repos: Repositories, code: str) -> Record:
    """
    Consume one use of ``code``.

    The counter is bumped with a compare-and-set on the stored version and
    re-validated on every attempt, so concurrent redemptions never push
    ``currentUses`` past ``maxUses``.

    Returns:
        The updated invite code record

    Raises:
        InviteCodeRejected: If no redeemable code matches
    """
    candidate = find_redeemable(repos, code)
    if candidate is None:
        raise InviteCodeRejected()

    key = repos.invite_codes.key(candidate["id"])
    for _ in range(MAX_REDEEM_ATTEMPTS):
        current, version = repos.store.get_versioned(key)
        if current is None or not is_redeemable(current):
            raise InviteCodeRejected()
        updated = {**current, "currentUses": current.get("currentUses", 0) + 1}
        if repos.store.set_if_version(key, updated, version):
            logger.info(f"Invite code {updated['id']} redeemed ({updated['currentUses']} uses)")
            return updated
        logger.warning(f"Concurrent update on invite code {candidate['id']}, retrying")

    raise InviteCodeRejected()


# PUBLIC_INTERFACE
def toggle_active(repos: Repositories, record: Record) -> Record:
    """Flip ``isActive`` and store the result."""
    updated = {**record, "isActive": not record.get("isActive")}
    repos.invite_codes.set(record["id"], updated)
    return updated


# PUBLIC_INTERFACE
def delete_invite_code(repos: Repositories, record: Record) -> None:
    """Remove the code and its entry in the organization's index."""
    repos.invite_codes.delete(record["id"])
    repos.org_invite_codes.remove(record["orgId"], record["id"])
