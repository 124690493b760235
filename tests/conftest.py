import pytest
from typing import Any, Dict, Generator
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from printstream.app import app as fastapi_app
from printstream.utils.security import get_current_user, get_optional_user


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(**overrides) -> Dict[str, Any]:
    user: Dict[str, Any] = {
        "id": "user-1",
        "email": "user@example.com",
        "first_name": "Test",
        "last_name": "User",
        "role": "user",
        "subscription_status": "none",
        "metadata": {},
        "token": "fake-token",
    }
    user.update(overrides)
    return user


def _login_as(app, user: Dict[str, Any]) -> Dict[str, Any]:
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_optional_user] = lambda: user
    return user


@pytest.fixture
def as_user(app):
    yield _login_as(app, make_user())
    app.dependency_overrides.clear()


@pytest.fixture
def as_subscriber(app):
    yield _login_as(app, make_user(id="subscriber-1", email="sub@example.com", subscription_status="active"))
    app.dependency_overrides.clear()


@pytest.fixture
def as_admin(app):
    yield _login_as(app, make_user(id="admin-1", email="admin@example.com", role="admin"))
    app.dependency_overrides.clear()


# Aucun test ne doit joindre Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_supabase_clients(monkeypatch):
    monkeypatch.setattr("printstream.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("printstream.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("printstream.admin.repository.get_service_supabase", lambda: MagicMock())


@pytest.fixture
def valid_address() -> Dict[str, Any]:
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "address1": "1 Main St",
        "city": "Austin",
        "state": "TX",
        "zip": "78701",
        "country": "US",
        "phone": "+1 (512) 555-0100",
        "email": "ada@example.com",
    }
