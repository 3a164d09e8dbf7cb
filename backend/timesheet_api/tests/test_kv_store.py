"""
Key-value store tests.

Covers plain reads and writes, batch operations, prefix scans, versioned
compare-and-set and transaction rollback.
"""
import pytest

from timesheet_api.database.kv_store import KVStore


class TestKVStore:
    """Basic store operations."""

    def test_get_missing_key_returns_none(self, store: KVStore):
        assert store.get("users:nobody") is None

    def test_set_then_get(self, store: KVStore):
        store.set("users:u1", {"id": "u1", "name": "Ada"})
        assert store.get("users:u1") == {"id": "u1", "name": "Ada"}

    def test_set_replaces_value(self, store: KVStore):
        store.set("users:u1", {"name": "Ada"})
        store.set("users:u1", {"name": "Grace"})
        assert store.get("users:u1") == {"name": "Grace"}

    def test_returned_values_are_copies(self, store: KVStore):
        store.set("org-users:o1", ["u1"])
        members = store.get("org-users:o1")
        members.append("u2")
        assert store.get("org-users:o1") == ["u1"]

    def test_scalar_values(self, store: KVStore):
        store.set("user-org:u1", "org_1")
        assert store.get("user-org:u1") == "org_1"

    def test_delete(self, store: KVStore):
        store.set("projects:p1", {"id": "p1"})
        store.delete("projects:p1")
        assert store.get("projects:p1") is None

    def test_delete_missing_key_is_ignored(self, store: KVStore):
        store.delete("projects:missing")
        assert store.get("projects:missing") is None


class TestBatchOperations:
    """mget/mset/mdelete and prefix scans."""

    def test_mget_keeps_order_and_gaps(self, store: KVStore):
        store.mset([("timesheets:a", {"id": "a"}), ("timesheets:c", {"id": "c"})])
        values = store.mget(["timesheets:c", "timesheets:b", "timesheets:a"])
        assert values == [{"id": "c"}, None, {"id": "a"}]

    def test_mget_empty(self, store: KVStore):
        assert store.mget([]) == []

    def test_mdelete(self, store: KVStore):
        store.mset([("k:1", 1), ("k:2", 2), ("k:3", 3)])
        store.mdelete(["k:1", "k:3"])
        assert store.mget(["k:1", "k:2", "k:3"]) == [None, 2, None]

    def test_get_by_prefix_orders_by_key(self, store: KVStore):
        store.set("invite-codes:b", {"id": "b"})
        store.set("invite-codes:a", {"id": "a"})
        store.set("invite-codes-archive:z", {"id": "z"})
        store.set("users:a", {"id": "user"})
        assert store.get_by_prefix("invite-codes:") == [{"id": "a"}, {"id": "b"}]

    def test_get_by_prefix_escapes_wildcards(self, store: KVStore):
        store.set("a_b:1", 1)
        store.set("axb:1", 2)
        assert store.get_by_prefix("a_b:") == [1]


class TestVersioning:
    """Versioned reads and compare-and-set writes."""

    def test_missing_key_has_version_zero(self, store: KVStore):
        assert store.get_versioned("invite-codes:none") == (None, 0)

    def test_every_write_bumps_version(self, store: KVStore):
        store.set("invite-codes:c1", {"currentUses": 0})
        _, first = store.get_versioned("invite-codes:c1")
        store.set("invite-codes:c1", {"currentUses": 1})
        _, second = store.get_versioned("invite-codes:c1")
        assert second == first + 1

    def test_set_if_version_applies_on_match(self, store: KVStore):
        store.set("invite-codes:c1", {"currentUses": 0})
        value, version = store.get_versioned("invite-codes:c1")
        assert store.set_if_version("invite-codes:c1", {"currentUses": 1}, version) is True
        assert store.get_versioned("invite-codes:c1") == ({"currentUses": 1}, version + 1)

    def test_set_if_version_rejects_stale_version(self, store: KVStore):
        store.set("invite-codes:c1", {"currentUses": 0})
        _, version = store.get_versioned("invite-codes:c1")
        store.set("invite-codes:c1", {"currentUses": 5})
        assert store.set_if_version("invite-codes:c1", {"currentUses": 1}, version) is False
        assert store.get("invite-codes:c1") == {"currentUses": 5}


class TestTransactions:
    """Grouped writes commit together or not at all."""

    def test_commit(self, store: KVStore, db_session):
        with store.transaction():
            store.set("projects:p1", {"id": "p1"})
            store.set("org-projects:o1", ["p1"])
        db_session.expire_all()
        assert store.get("org-projects:o1") == ["p1"]

    def test_rollback_on_error(self, store: KVStore):
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.set("projects:p1", {"id": "p1"})
                store.set("org-projects:o1", ["p1"])
                raise RuntimeError("index write failed")
        assert store.get("projects:p1") is None
        assert store.get("org-projects:o1") is None
