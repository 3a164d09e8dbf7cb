"""
Pytest configuration and fixtures for backend testing.

Runs the app against an in-memory SQLite database that is recreated for
every test, and provides the test client, a session-bound store, and
signed-up admin/staff accounts.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from timesheet_api.api.main import app
from timesheet_api.database.connection import DatabaseManager, SessionLocal
from timesheet_api.database.kv_store import KVStore
from timesheet_api.database.repositories import Repositories

from .test_base import Account, ApiDriver


@pytest.fixture(autouse=True)
def reset_database():
    """Start every test from empty tables."""
    DatabaseManager.reset_db()
    yield


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session: Session) -> KVStore:
    return KVStore(db_session)


@pytest.fixture
def repos(store: KVStore) -> Repositories:
    return Repositories(store)


@pytest.fixture(scope="function")
def client() -> Generator[TestClient, None, None]:
    """FastAPI test client with startup hooks run."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api(client: TestClient) -> ApiDriver:
    return ApiDriver(client)


@pytest.fixture
def admin(api: ApiDriver) -> Account:
    """Admin who founded the ``Acme`` organization."""
    return api.admin()


@pytest.fixture
def staff(api: ApiDriver, admin: Account) -> Account:
    """Staff member who joined ``Acme`` with an invite code."""
    return api.staff(admin)


@pytest.fixture
def other_admin(api: ApiDriver) -> Account:
    """Admin of a second, unrelated organization."""
    return api.admin(email="boss@globex.io", organization="Globex", name="Gil Globex")
