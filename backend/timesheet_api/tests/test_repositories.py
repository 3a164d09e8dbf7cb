"""
Repository and index tests over the key-value store.
"""
from timesheet_api.database.repositories import Repositories


class TestEntityRepository:
    """Namespaced entity records."""

    def test_records_live_under_namespaced_keys(self, repos: Repositories):
        repos.projects.set("project_1", {"id": "project_1", "name": "Website"})
        assert repos.store.get("projects:project_1") == {"id": "project_1", "name": "Website"}

    def test_batch_get_skips_missing_by_default(self, repos: Repositories):
        repos.timesheets.set("t1", {"id": "t1"})
        repos.timesheets.set("t3", {"id": "t3"})
        assert repos.timesheets.batch_get(["t1", "t2", "t3"]) == [{"id": "t1"}, {"id": "t3"}]

    def test_batch_get_can_keep_missing(self, repos: Repositories):
        repos.timesheets.set("t1", {"id": "t1"})
        assert repos.timesheets.batch_get(["t2", "t1"], keep_missing=True) == [None, {"id": "t1"}]

    def test_scan_is_limited_to_namespace(self, repos: Repositories):
        repos.users.set("u1", {"id": "u1"})
        repos.projects.set("p1", {"id": "p1"})
        assert repos.users.scan() == [{"id": "u1"}]

    def test_find_invite_code_by_code(self, repos: Repositories):
        repos.invite_codes.set("code_1", {"id": "code_1", "code": "ABCD1234"})
        repos.invite_codes.set("code_2", {"id": "code_2", "code": "ZZZZ9999"})
        assert [record["id"] for record in repos.invite_codes.find_by_code("ABCD1234")] == ["code_1"]
        assert repos.invite_codes.find_by_code("NOPE0000") == []


class TestIdListIndex:
    """Hand-maintained one-to-many indexes."""

    def test_missing_index_is_empty(self, repos: Repositories):
        assert repos.org_users.list("org_x") == []

    def test_append_keeps_insertion_order(self, repos: Repositories):
        repos.user_timesheets.append("u1", "t1")
        repos.user_timesheets.append("u1", "t2")
        assert repos.user_timesheets.list("u1") == ["t1", "t2"]
        assert repos.store.get("user-timesheets:u1") == ["t1", "t2"]

    def test_append_skips_duplicates(self, repos: Repositories):
        repos.org_projects.append("org_1", "p1")
        repos.org_projects.append("org_1", "p1")
        assert repos.org_projects.list("org_1") == ["p1"]

    def test_remove(self, repos: Repositories):
        for project_id in ("p1", "p2", "p3"):
            repos.org_projects.append("org_1", project_id)
        repos.org_projects.remove("org_1", "p2")
        assert repos.org_projects.list("org_1") == ["p1", "p3"]

    def test_clear(self, repos: Repositories):
        repos.org_invite_codes.append("org_1", "code_1")
        repos.org_invite_codes.clear("org_1")
        assert repos.store.get("org-invite-codes:org_1") is None


class TestUserOrgMapping:

    def test_scalar_mapping(self, repos: Repositories):
        repos.user_org.set("u1", "org_1")
        assert repos.user_org.get("u1") == "org_1"
        assert repos.store.get("user-org:u1") == "org_1"
        repos.user_org.delete("u1")
        assert repos.user_org.get("u1") is None
