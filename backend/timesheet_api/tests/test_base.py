"""
Base test utilities and common patterns for backend testing.

Provides assertion helpers and a small API driver that signs up admins and
staff and hands back their auth headers.
"""
from dataclasses import dataclass
from typing import Dict, Any, Optional
from fastapi import status
from fastapi.testclient import TestClient

API = "/api/v1"
PASSWORD = "secret-pass-1"


class BaseAPITest:
    """Base class for API endpoint tests."""

    def assert_success_response(self, response, expected_status: int = status.HTTP_200_OK):
        """Assert that response indicates success."""
        assert response.status_code == expected_status, response.text
        assert response.json() is not None

    def assert_error_response(self, response, expected_status: int, expected_error: Optional[str] = None):
        """Assert that response indicates an error with an ``error`` body."""
        assert response.status_code == expected_status, response.text
        response_data = response.json()
        assert "error" in response_data
        if expected_error:
            assert expected_error in response_data["error"]

    def assert_validation_error(self, response, field_name: Optional[str] = None):
        """Assert that response indicates a request validation error."""
        self.assert_error_response(response, status.HTTP_400_BAD_REQUEST)
        if field_name:
            assert field_name in response.json()["error"]

    def assert_unauthorized(self, response):
        self.assert_error_response(response, status.HTTP_401_UNAUTHORIZED)

    def assert_forbidden(self, response, expected_error: Optional[str] = None):
        self.assert_error_response(response, status.HTTP_403_FORBIDDEN, expected_error)

    def assert_not_found(self, response, expected_error: Optional[str] = None):
        self.assert_error_response(response, status.HTTP_404_NOT_FOUND, expected_error)


@dataclass
class Account:
    """A signed-up user with a live bearer token."""
    user_id: str
    email: str
    org_id: Optional[str]
    headers: Dict[str, str]


class ApiDriver:
    """Drives the public API to set up organizations and members."""

    def __init__(self, client: TestClient):
        self.client = client

    def signup(self, email: str, name: str = "Test User", password: str = PASSWORD, **extra) -> Any:
        payload = {"email": email, "password": password, "name": name, **extra}
        return self.client.post(f"{API}/signup", json=payload)

    def login(self, email: str, password: str = PASSWORD) -> Dict[str, str]:
        response = self.client.post(f"{API}/login", json={"email": email, "password": password})
        assert response.status_code == status.HTTP_200_OK, response.text
        return {"Authorization": f"Bearer {response.json()['accessToken']}"}

    def register(self, email: str, name: str = "Test User", **extra) -> Account:
        response = self.signup(email, name=name, **extra)
        assert response.status_code == status.HTTP_200_OK, response.text
        data = response.json()
        return Account(user_id=data["userId"], email=email, org_id=data["orgId"], headers=self.login(email))

    def admin(self, email: str = "admin@acme.io", organization: str = "Acme", name: str = "Ada Admin") -> Account:
        return self.register(email, name=name, organizationName=organization)

    def invite(self, admin: Account, **options) -> Dict[str, Any]:
        response = self.client.post(f"{API}/invite-codes", json=options, headers=admin.headers)
        assert response.status_code == status.HTTP_200_OK, response.text
        return response.json()["inviteCode"]

    def staff(self, admin: Account, email: str = "staff@acme.io", name: str = "Sam Staff") -> Account:
        code = self.invite(admin)
        return self.register(email, name=name, inviteCode=code["code"])

    def project(self, admin: Account, name: str = "Website", assigned=None) -> Dict[str, Any]:
        payload = {"name": name, "description": f"{name} work", "assignedUsers": assigned or []}
        response = self.client.post(f"{API}/projects", json=payload, headers=admin.headers)
        assert response.status_code == status.HTTP_200_OK, response.text
        return response.json()["project"]

    def timesheet(self, account: Account, project_id: str, start: str = "2024-01-15T09:00:00.000Z",
                  end: str = "2024-01-15T10:30:00.000Z", **extra) -> Dict[str, Any]:
        payload = {"projectId": project_id, "taskName": "Development", "startTime": start, "endTime": end, **extra}
        response = self.client.post(f"{API}/timesheets", json=payload, headers=account.headers)
        assert response.status_code == status.HTTP_200_OK, response.text
        return response.json()["timesheet"]
