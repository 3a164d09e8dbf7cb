"""
Identity provider used for sign-up, sign-in and bearer token resolution.

The API treats identities as owned by an external service: it only creates
and deletes accounts, exchanges credentials for tokens and resolves tokens
back to a stable user id. Application profiles (role, organization) live in
the key-value store, never here.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.models import AuthIdentity
from .jwt_handler import JWTHandler, PasswordHandler

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """Raised when the identity provider rejects a request."""


@dataclass
class Identity:
    """Resolved identity of a caller."""
    id: str
    email: str
    user_metadata: Dict[str, Any] = field(default_factory=dict)


class IdentityProvider:
    """Accounts backed by the ``auth_identities`` table."""

    def __init__(self, db: Session):
        self.db = db

    def create_user(self, email: str, password: str, user_metadata: Optional[Dict[str, Any]] = None) -> Identity:
        """
        Create a confirmed account.

        Raises:
            IdentityError: If the email is taken or the password is too weak
        """
        email = email.strip().lower()
        if not PasswordHandler.validate_password_strength(password):
            raise IdentityError("Password should be at least 6 characters")

        existing = self.db.execute(
            select(AuthIdentity).where(AuthIdentity.email == email)
        ).scalar_one_or_none()
        if existing is not None:
            raise IdentityError("A user with this email address has already been registered")

        account = AuthIdentity(
            id=str(uuid4()),
            email=email,
            password_hash=PasswordHandler.hash_password(password),
            user_metadata=user_metadata or {},
        )
        try:
            self.db.add(account)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Failed to create identity for {email}: {exc}")
            raise IdentityError("Failed to create user") from exc

        logger.info(f"Identity created: {account.id}")
        return Identity(id=account.id, email=account.email, user_metadata=dict(account.user_metadata))

    def delete_user(self, user_id: str) -> None:
        """
        Delete an account.

        Raises:
            IdentityError: If the account does not exist or cannot be removed
        """
        account = self.db.get(AuthIdentity, user_id)
        if account is None:
            raise IdentityError("User not found")
        try:
            self.db.delete(account)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise IdentityError("Failed to delete user") from exc
        logger.info(f"Identity deleted: {user_id}")

    def sign_in(self, email: str, password: str) -> str:
        """
        Exchange credentials for an access token.

        Raises:
            IdentityError: If the credentials are wrong
        """
        account = self.db.execute(
            select(AuthIdentity).where(AuthIdentity.email == email.strip().lower())
        ).scalar_one_or_none()
        if account is None or not PasswordHandler.verify_password(password, account.password_hash):
            raise IdentityError("Invalid login credentials")

        account.last_sign_in_at = datetime.now(timezone.utc)
        self.db.commit()
        return JWTHandler.create_user_token(account.id, account.email)

    def get_user(self, access_token: str) -> Optional[Identity]:
        """
        Resolve a token to its identity.

        Returns:
            Optional[Identity]: The identity, or None for bad, expired or
            orphaned tokens
        """
        payload = JWTHandler.verify_token(access_token)
        if payload is None or payload.get("type") != "access":
            return None
        user_id = payload.get("sub")
        if not user_id:
            return None
        try:
            account = self.db.get(AuthIdentity, user_id)
        except SQLAlchemyError as exc:
            logger.error(f"Identity lookup failed: {exc}")
            return None
        if account is None:
            return None
        return Identity(id=account.id, email=account.email, user_metadata=dict(account.user_metadata or {}))
