"""
Shared fixtures for the workspace messaging tests.
"""
import os

# Settings are cached on first use, so the test environment must be in place
# before the application is imported.
os.environ["DATABASE_URL"] = "sqlite:///./test_workspace.db"
os.environ["SECRET_KEY"] = "test-secret-key-12345"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_FORMAT"] = "text"
os.environ["SCHEDULER_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.core.database import drop_db, get_engine, get_session_factory, init_db
from app.core.scheduler import get_scheduler

TEST_DB_FILE = "./test_workspace.db"


@pytest.fixture(scope="session", autouse=True)
def remove_test_database():
    """Delete the SQLite file once the run is over."""
    yield
    get_engine().dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture(scope="function")
def test_db():
    """Create fresh tables for each test and drop them afterwards."""
    init_db()
    engine = get_engine()

    yield engine

    get_scheduler().scheduler.remove_all_jobs()
    drop_db()


@pytest.fixture
def db(test_db):
    """A session for calling services directly."""
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db):
    """Create a test client."""
    return TestClient(app)


def register(client, email: str, name_first: str = "John", name_last: str = "Smith") -> dict:
    """Register a user and return {"token", "authUserId"}."""
    response = client.post(
        "/auth/register/v3",
        json={"email": email, "password": "password", "nameFirst": name_first, "nameLast": name_last},
    )
    assert response.status_code == 200, response.text
    return response.json()


def auth(user: dict) -> dict:
    """Headers carrying a user's session token."""
    return {"token": user["token"]}


@pytest.fixture
def owner(client):
    """First registered user: handle johnsmith, global owner."""
    return register(client, "johnsmith@example.com")


@pytest.fixture
def member(client, owner):
    """Second registered user: handle johnsmith0."""
    return register(client, "johndoe@example.com")


@pytest.fixture
def outsider(client, member):
    """Third registered user: handle johnsmith1, in no conversation by default."""
    return register(client, "janesmith@example.com")


def create_channel(client, user: dict, name: str = "First", is_public: bool = True) -> int:
    response = client.post(
        "/channels/create/v3",
        json={"name": name, "isPublic": is_public},
        headers=auth(user),
    )
    assert response.status_code == 200, response.text
    return response.json()["channelId"]


def create_dm(client, user: dict, u_ids: list) -> int:
    response = client.post("/dm/create/v2", json={"uIds": u_ids}, headers=auth(user))
    assert response.status_code == 200, response.text
    return response.json()["dmId"]


def send(client, user: dict, channel_id: int, text: str) -> int:
    response = client.post(
        "/message/send/v2",
        json={"channelId": channel_id, "message": text},
        headers=auth(user),
    )
    assert response.status_code == 200, response.text
    return response.json()["messageId"]


def send_dm(client, user: dict, dm_id: int, text: str) -> int:
    response = client.post(
        "/message/senddm/v2",
        json={"dmId": dm_id, "message": text},
        headers=auth(user),
    )
    assert response.status_code == 200, response.text
    return response.json()["messageId"]


def notifications(client, user: dict) -> list:
    response = client.get("/notifications/get/v1", headers=auth(user))
    assert response.status_code == 200, response.text
    return response.json()["notifications"]
