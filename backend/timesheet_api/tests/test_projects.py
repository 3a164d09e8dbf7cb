"""
Project management tests.
"""
from fastapi import status

from .test_base import API, BaseAPITest


class TestProjects(BaseAPITest):
    """Project CRUD and staff visibility."""

    def test_create_project(self, client, admin, staff, repos):
        response = client.post(
            f"{API}/projects",
            json={"name": "Website", "description": "Relaunch", "assignedUsers": [staff.user_id]},
            headers=admin.headers,
        )
        self.assert_success_response(response)
        project = response.json()["project"]
        assert project["id"].startswith("project_")
        assert project["orgId"] == admin.org_id
        assert project["createdBy"] == admin.user_id
        assert project["assignedUsers"] == [staff.user_id]
        assert repos.org_projects.list(admin.org_id) == [project["id"]]

    def test_create_requires_admin(self, client, staff):
        response = client.post(f"{API}/projects", json={"name": "Side gig"}, headers=staff.headers)
        self.assert_forbidden(response, "Forbidden - Admin only")

    def test_create_requires_name(self, client, admin):
        response = client.post(f"{API}/projects", json={"description": "no name"}, headers=admin.headers)
        self.assert_validation_error(response, "name")

    def test_admin_sees_all_projects(self, client, api, admin, staff):
        first = api.project(admin, "Website")
        second = api.project(admin, "Mobile", assigned=[staff.user_id])
        response = client.get(f"{API}/projects", headers=admin.headers)
        assert [project["id"] for project in response.json()] == [first["id"], second["id"]]

    def test_staff_sees_only_assigned_projects(self, client, api, admin, staff):
        api.project(admin, "Website")
        assigned = api.project(admin, "Mobile", assigned=[staff.user_id])
        response = client.get(f"{API}/projects", headers=staff.headers)
        assert [project["id"] for project in response.json()] == [assigned["id"]]

    def test_staff_sees_nothing_when_unassigned(self, client, api, admin, staff):
        api.project(admin, "Admin only", assigned=[admin.user_id])
        response = client.get(f"{API}/projects", headers=staff.headers)
        self.assert_success_response(response)
        assert response.json() == []

    def test_user_without_organization_sees_nothing(self, client, api, admin):
        api.project(admin, "Website")
        loner = api.register("solo@acme.io")
        assert client.get(f"{API}/projects", headers=loner.headers).json() == []

    def test_organizations_are_isolated(self, client, api, admin, other_admin):
        api.project(admin, "Website")
        assert client.get(f"{API}/projects", headers=other_admin.headers).json() == []

    def test_update_project(self, client, api, admin, staff):
        project = api.project(admin, "Website")
        response = client.put(
            f"{API}/projects/{project['id']}",
            json={"name": "Website v2", "assignedUsers": [staff.user_id], "orgId": "org_other", "id": "x"},
            headers=admin.headers,
        )
        self.assert_success_response(response)
        updated = response.json()["project"]
        assert updated["name"] == "Website v2"
        assert updated["description"] == "Website work"
        assert updated["assignedUsers"] == [staff.user_id]
        assert updated["id"] == project["id"]
        assert updated["orgId"] == admin.org_id
        assert updated["createdAt"] == project["createdAt"]

    def test_update_can_clear_description(self, client, api, admin):
        project = api.project(admin, "Website")
        response = client.put(f"{API}/projects/{project['id']}", json={"description": None}, headers=admin.headers)
        assert response.json()["project"]["description"] is None

    def test_update_other_organization_forbidden(self, client, api, admin, other_admin):
        project = api.project(admin, "Website")
        response = client.put(f"{API}/projects/{project['id']}", json={"name": "Mine"}, headers=other_admin.headers)
        self.assert_forbidden(response)

    def test_update_missing_project(self, client, admin):
        response = client.put(f"{API}/projects/project_missing", json={"name": "X"}, headers=admin.headers)
        self.assert_not_found(response, "Project not found")

    def test_delete_project(self, client, api, admin, repos):
        project = api.project(admin, "Website")
        response = client.delete(f"{API}/projects/{project['id']}", headers=admin.headers)
        assert response.json() == {"success": True}
        assert repos.projects.get(project["id"]) is None
        assert repos.org_projects.list(admin.org_id) == []

    def test_delete_other_organization_forbidden(self, client, api, admin, other_admin, repos):
        project = api.project(admin, "Website")
        response = client.delete(f"{API}/projects/{project['id']}", headers=other_admin.headers)
        self.assert_forbidden(response)
        assert repos.projects.get(project["id"]) is not None

    def test_staff_cannot_delete(self, client, api, admin, staff):
        project = api.project(admin, "Website")
        response = client.delete(f"{API}/projects/{project['id']}", headers=staff.headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
