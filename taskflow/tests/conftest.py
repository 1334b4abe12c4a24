import pytest
from fastapi.testclient import TestClient

from taskflow.config import Settings
from taskflow.crud import TaskStore, UserStore
from taskflow.database import Database
from taskflow.main import create_app
from taskflow.services.insights import InsightGenerator

from .fakes import FakeLLMClient

PASSWORD = "Str0ng!Pass"


@pytest.fixture
def settings():
    """Settings for an isolated in-memory database."""
    return Settings(jwt_secret="test-secret", database_url="sqlite://", log_level="WARNING")


@pytest.fixture
def database(settings):
    db = Database(settings.database_url)
    db.connect()
    yield db
    db.disconnect()


@pytest.fixture
def task_store(database):
    return TaskStore(database)


@pytest.fixture
def user_store(database):
    return UserStore(database)


@pytest.fixture
def owner(user_store):
    """A user created directly in the store (no password check needed)."""
    return user_store.create_user("owner@example.com", "not-a-real-hash")


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def app(settings, database, fake_llm):
    return create_app(settings, database, InsightGenerator(settings, client=fake_llm))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def signup(client, email):
    response = client.post("/auth/signup", json={"email": email, "password": PASSWORD})
    assert response.status_code == 201, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def auth_headers(client):
    return signup(client, "alice@example.com")


@pytest.fixture
def other_headers(client):
    return signup(client, "bob@example.com")
