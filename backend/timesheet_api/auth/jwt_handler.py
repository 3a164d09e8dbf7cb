"""
JWT token handling for the identity provider and signed storage URLs.

Provides utilities for creating, validating, and decoding JWT tokens and
for hashing account passwords.
"""
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

# Configuration
SECRET_KEY_CONFIGURED = bool(os.getenv("SECRET_KEY"))
SECRET_KEY = os.getenv("SECRET_KEY") or secrets.token_urlsafe(32)
# Signed photo URLs outlive the process, so they never use a generated key
STORAGE_SIGNING_KEY = os.getenv("STORAGE_SIGNING_KEY") or os.getenv("SECRET_KEY")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 hours default

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class JWTHandler:
    """JWT token handler for authentication."""

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None,
                            key: Optional[str] = None) -> str:
        """
        Create a JWT access token.

        Args:
            data: Token payload data
            expires_delta: Token expiration delta
            key: Signing key, defaults to SECRET_KEY

        Returns:
            str: Encoded JWT token
        """
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, key or SECRET_KEY, algorithm=ALGORITHM)

    @staticmethod
    def verify_token(token: str, key: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token to verify
            key: Verification key, defaults to SECRET_KEY

        Returns:
            Optional[Dict[str, Any]]: Token payload if valid, None if invalid
        """
        try:
            return jwt.decode(token, key or SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError:
            return None

    @staticmethod
    def create_user_token(user_id: str, email: str) -> str:
        """
        Create an access token for an identity.

        Only the subject and email are embedded; roles are always read
        from the user record.
        """
        data = {
            "sub": user_id,
            "email": email,
            "type": "access"
        }
        return JWTHandler.create_access_token(data)

    @staticmethod
    def storage_signing_configured() -> bool:
        """Whether a stable key for signed storage URLs is set."""
        return bool(STORAGE_SIGNING_KEY)

    @staticmethod
    def create_storage_token(bucket: str, path: str, expires_in: int) -> str:
        """
        Create a token granting read access to one stored object.

        Args:
            bucket: Bucket name
            path: Object path inside the bucket
            expires_in: Lifetime in seconds

        Returns:
            str: Signed token

        Raises:
            ValueError: If no storage signing key is configured
        """
        if not STORAGE_SIGNING_KEY:
            raise ValueError("Storage signing key is not configured")
        data = {
            "bucket": bucket,
            "path": path,
            "type": "storage"
        }
        return JWTHandler.create_access_token(data, timedelta(seconds=expires_in), key=STORAGE_SIGNING_KEY)

    @staticmethod
    def verify_storage_token(token: str, bucket: str, path: str) -> bool:
        if not STORAGE_SIGNING_KEY:
            return False
        payload = JWTHandler.verify_token(token, key=STORAGE_SIGNING_KEY)
        if payload is None or payload.get("type") != "storage":
            return False
        return payload.get("bucket") == bucket and payload.get("path") == path


class PasswordHandler:
    """Password handling utilities."""

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def validate_password_strength(password: str) -> bool:
        """
        Validate password strength.

        Args:
            password: Password to validate

        Returns:
            bool: True if password meets requirements
        """
        return len(password) >= 6
