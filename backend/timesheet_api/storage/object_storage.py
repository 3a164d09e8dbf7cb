"""
Object storage for timesheet photos.

Objects live in a private bucket; callers never read them directly but get
a signed URL that carries a short JWT binding bucket, path and expiry.
"""
import base64
import binascii
import logging
import os
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.jwt_handler import JWTHandler
from ..database.models import StoredObject

logger = logging.getLogger(__name__)

BUCKET_NAME = os.getenv("STORAGE_BUCKET", "timesheet-photos")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")
SIGNED_URL_TTL_SECONDS = 31536000  # 1 year
DEFAULT_CONTENT_TYPE = "image/jpeg"

DATA_URI_PATTERN = re.compile(r"^data:(image/[\w.+-]+);base64,")


class StorageError(Exception):
    """Raised when the storage service rejects an operation."""


@dataclass
class DecodedPhoto:
    data: bytes
    content_type: str


# PUBLIC_INTERFACE
def decode_photo_data(photo_data: str) -> DecodedPhoto:
    """
    Decode an inline image payload.

    Accepts either a ``data:image/<type>;base64,`` URI or bare base64.

    Raises:
        ValueError: If the payload is not valid base64 or decodes to nothing
    """
    content_type = DEFAULT_CONTENT_TYPE
    match = DATA_URI_PATTERN.match(photo_data)
    if match:
        content_type = match.group(1)
        photo_data = photo_data[match.end():]
    try:
        data = base64.b64decode(photo_data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid photo data") from exc
    if not data:
        raise ValueError("Invalid photo data")
    return DecodedPhoto(data=data, content_type=content_type)


class ObjectStorage:
    """Bucketed blob storage with signed read URLs."""

    def __init__(self, db: Session, bucket: str = BUCKET_NAME, base_url: str = PUBLIC_BASE_URL,
                 url_prefix: str = ""):
        self.db = db
        self.bucket = bucket
        self.base_url = base_url
        self.url_prefix = url_prefix

    @property
    def can_sign(self) -> bool:
        return JWTHandler.storage_signing_configured()

    def ensure_bucket(self) -> None:
        """Log the bucket in use; buckets need no provisioning here."""
        count = len(self.db.execute(
            select(StoredObject.id).where(StoredObject.bucket == self.bucket)
        ).all())
        logger.info(f"Storage bucket ready: {self.bucket} ({count} objects)")

    def upload(self, path: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> str:
        """
        Store a new object. Existing paths are never overwritten.

        Raises:
            StorageError: If the path exists or the write fails
        """
        stored = StoredObject(bucket=self.bucket, path=path, content_type=content_type,
                              data=data, size=len(data))
        try:
            self.db.add(stored)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise StorageError("The resource already exists") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Upload of {path} failed: {exc}")
            raise StorageError("Upload failed") from exc
        return path

    def create_signed_url(self, path: str, expires_in: int = SIGNED_URL_TTL_SECONDS) -> str:
        """
        Build a URL granting read access to ``path`` for ``expires_in`` seconds.

        Raises:
            StorageError: If the object does not exist or no signing key is set
        """
        if self.get(path) is None:
            raise StorageError("Object not found")
        try:
            token = JWTHandler.create_storage_token(self.bucket, path, expires_in)
        except ValueError as exc:
            raise StorageError(str(exc)) from exc
        return f"{self.base_url}{self.url_prefix}/storage/{self.bucket}/{quote(path)}?token={token}"

    def can_read(self, path: str, token: str) -> bool:
        """Whether ``token`` is a live signature for ``path`` in this bucket."""
        return bool(token) and JWTHandler.verify_storage_token(token, self.bucket, path)

    def get(self, path: str) -> Optional[StoredObject]:
        return self.db.execute(
            select(StoredObject).where(StoredObject.bucket == self.bucket, StoredObject.path == path)
        ).scalar_one_or_none()
