"""
SQLAlchemy database models for the multitenant timesheet service.

The application itself only ever talks to ``kv_store``: every organization,
user, project, timesheet and invite code is a JSON document in that table.
``auth_identities`` and ``storage_objects`` back the bundled identity
provider and object storage, which the API treats as external services.
"""
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Integer, DateTime, JSON, LargeBinary, Index
)
from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


class UserRole(str, enum.Enum):
    """User roles within an organization."""
    ADMIN = "admin"
    STAFF = "staff"


class KVEntry(Base):
    """A single key-value document.

    ``version`` is bumped on every write and backs compare-and-set updates.
    """
    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<KVEntry(key='{self.key}', version={self.version})>"


class AuthIdentity(Base):
    """Account held by the identity provider."""
    __tablename__ = "auth_identities"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    user_metadata = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    last_sign_in_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<AuthIdentity(id={self.id}, email='{self.email}')>"


class StoredObject(Base):
    """Blob kept by the object storage service."""
    __tablename__ = "storage_objects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bucket = Column(String(100), nullable=False)
    path = Column(String(512), nullable=False)
    content_type = Column(String(100), nullable=False, default="application/octet-stream")
    data = Column(LargeBinary, nullable=False)
    size = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index('idx_storage_bucket_path', 'bucket', 'path', unique=True),
    )

    def __repr__(self):
        return f"<StoredObject(bucket='{self.bucket}', path='{self.path}')>"
