"""
Entity repositories and id-list indexes over the key-value store.

Each entity lives under ``<namespace>:<id>``. One-to-many relationships are
kept as separate list-valued keys (``org-users:<orgId>`` and friends) that
the route handlers update alongside the entity records.
"""
from typing import Any, Dict, List, Optional, Sequence

from .kv_store import KVStore

Record = Dict[str, Any]


class EntityRepository:
    """Flat records stored under ``<namespace>:<id>``."""

    namespace: str = ""

    def __init__(self, store: KVStore):
        self.store = store

    def key(self, entity_id: str) -> str:
        return f"{self.namespace}:{entity_id}"

    def get(self, entity_id: str) -> Optional[Record]:
        return self.store.get(self.key(entity_id))

    def set(self, entity_id: str, record: Record) -> Record:
        self.store.set(self.key(entity_id), record)
        return record

    def delete(self, entity_id: str) -> None:
        self.store.delete(self.key(entity_id))

    def batch_get(self, entity_ids: Sequence[str], keep_missing: bool = False) -> List[Optional[Record]]:
        """
        Fetch several records in index order.

        Args:
            entity_ids: Ids to load
            keep_missing: Keep ``None`` placeholders for dangling ids

        Returns:
            List of records
        """
        records = self.store.mget([self.key(entity_id) for entity_id in entity_ids])
        if keep_missing:
            return records
        return [record for record in records if record is not None]

    def scan(self) -> List[Record]:
        """Every record in the namespace."""
        return self.store.get_by_prefix(f"{self.namespace}:")


class OrganizationRepository(EntityRepository):
    namespace = "organizations"


class UserRepository(EntityRepository):
    namespace = "users"


class ProjectRepository(EntityRepository):
    namespace = "projects"


class TimesheetRepository(EntityRepository):
    namespace = "timesheets"


class InviteCodeRepository(EntityRepository):
    namespace = "invite-codes"

    def find_by_code(self, code: str) -> List[Record]:
        """All invite codes carrying ``code``; uniqueness is not guaranteed."""
        return [record for record in self.scan() if record.get("code") == code]


class IdListIndex:
    """Ordered list of member ids stored under ``<namespace>:<ownerId>``."""

    def __init__(self, store: KVStore, namespace: str):
        self.store = store
        self.namespace = namespace

    def key(self, owner_id: str) -> str:
        return f"{self.namespace}:{owner_id}"

    def list(self, owner_id: str) -> List[str]:
        return self.store.get(self.key(owner_id)) or []

    def append(self, owner_id: str, member_id: str) -> List[str]:
        """Add ``member_id`` unless it is already listed."""
        members = self.list(owner_id)
        if member_id not in members:
            members.append(member_id)
            self.store.set(self.key(owner_id), members)
        return members

    def remove(self, owner_id: str, member_id: str) -> List[str]:
        members = [existing for existing in self.list(owner_id) if existing != member_id]
        self.store.set(self.key(owner_id), members)
        return members

    def clear(self, owner_id: str) -> None:
        self.store.delete(self.key(owner_id))


class UserOrgMapping:
    """Scalar ``user-org:<userId> -> orgId`` lookup."""

    namespace = "user-org"

    def __init__(self, store: KVStore):
        self.store = store

    def key(self, user_id: str) -> str:
        return f"{self.namespace}:{user_id}"

    def get(self, user_id: str) -> Optional[str]:
        return self.store.get(self.key(user_id))

    def set(self, user_id: str, org_id: str) -> None:
        self.store.set(self.key(user_id), org_id)

    def delete(self, user_id: str) -> None:
        self.store.delete(self.key(user_id))


class Repositories:
    """Every repository and index bound to one store."""

    def __init__(self, store: KVStore):
        self.store = store
        self.organizations = OrganizationRepository(store)
        self.users = UserRepository(store)
        self.projects = ProjectRepository(store)
        self.timesheets = TimesheetRepository(store)
        self.invite_codes = InviteCodeRepository(store)
        self.user_org = UserOrgMapping(store)
        self.org_users = IdListIndex(store, "org-users")
        self.org_projects = IdListIndex(store, "org-projects")
        self.org_invite_codes = IdListIndex(store, "org-invite-codes")
        self.user_timesheets = IdListIndex(store, "user-timesheets")

    def transaction(self):
        return self.store.transaction()
