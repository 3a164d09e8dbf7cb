"""
Key-value document store backed by the ``kv_store`` table.

Keys are plain strings such as ``projects:project_1700000000000_ab12cd34e``
and values are arbitrary JSON documents. The store has no schema and no
secondary indexes; callers maintain their own id-list indexes on top of it.
"""
import copy
import functools
import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from ..errors import UpstreamError
from .models import KVEntry

logger = logging.getLogger(__name__)


def _store_operation(func):
    """Translate SQLAlchemy failures into ``UpstreamError``."""

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error(f"Key-value store {func.__name__} failed: {exc}")
            self.db.rollback()
            raise UpstreamError("Key-value store operation failed") from exc

    return wrapper


class KVStore:
    """Generic get/set/delete/scan operations over string keys."""

    def __init__(self, db: Session):
        self.db = db

    @_store_operation
    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key`` or ``None``."""
        entry = self.db.get(KVEntry, key)
        if entry is None:
            return None
        return copy.deepcopy(entry.value)

    @_store_operation
    def get_versioned(self, key: str) -> Tuple[Optional[Any], int]:
        """Return ``(value, version)``; version is 0 for a missing key."""
        entry = self.db.get(KVEntry, key)
        if entry is None:
            return None, 0
        self.db.refresh(entry)
        return copy.deepcopy(entry.value), entry.version

    @_store_operation
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        entry = self.db.get(KVEntry, key)
        if entry is None:
            self.db.add(KVEntry(key=key, value=copy.deepcopy(value), version=1))
        else:
            entry.value = copy.deepcopy(value)
            entry.version = entry.version + 1
            flag_modified(entry, "value")
        self.db.flush()

    @_store_operation
    def set_if_version(self, key: str, value: Any, expected_version: int) -> bool:
        """
        Compare-and-set: write ``value`` only if the key is still at
        ``expected_version``.

        Returns:
            bool: True if the write happened
        """
        self.db.flush()
        result = self.db.execute(
            update(KVEntry)
            .where(KVEntry.key == key, KVEntry.version == expected_version)
            .values(value=copy.deepcopy(value), version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        entry = self.db.get(KVEntry, key)
        if entry is not None:
            self.db.expire(entry)
        return result.rowcount == 1

    @_store_operation
    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""
        entry = self.db.get(KVEntry, key)
        if entry is not None:
            self.db.delete(entry)
            self.db.flush()

    @_store_operation
    def mget(self, keys: Sequence[str]) -> List[Optional[Any]]:
        """Fetch several keys at once, in the order given, ``None`` for gaps."""
        if not keys:
            return []
        rows = self.db.execute(select(KVEntry).where(KVEntry.key.in_(list(keys)))).scalars().all()
        by_key = {row.key: row.value for row in rows}
        return [copy.deepcopy(by_key.get(key)) for key in keys]

    @_store_operation
    def mset(self, items: Sequence[Tuple[str, Any]]) -> None:
        """Store several key/value pairs."""
        for key, value in items:
            self.set(key, value)

    @_store_operation
    def mdelete(self, keys: Sequence[str]) -> None:
        """Remove several keys."""
        for key in keys:
            self.delete(key)

    @_store_operation
    def get_by_prefix(self, prefix: str) -> List[Any]:
        """Return every value whose key starts with ``prefix``, ordered by key."""
        rows = self.db.execute(
            select(KVEntry)
            .where(KVEntry.key.startswith(prefix, autoescape=True))
            .order_by(KVEntry.key)
        ).scalars().all()
        return [copy.deepcopy(row.value) for row in rows]

    @contextmanager
    def transaction(self) -> Iterator["KVStore"]:
        """
        Run a group of writes as one unit.

        Commits when the block finishes, rolls every write back when it
        raises.
        """
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as exc:
            logger.error(f"Key-value store transaction failed, rolling back: {exc}")
            self.db.rollback()
            raise UpstreamError("Key-value store operation failed") from exc
        except Exception:
            self.db.rollback()
            raise
