"""
Shared fixtures: a throwaway SQLite database per session, tables reset per test, a TestClient,
and helpers to register users and build a small catalog through the API.
Environment is set before any tracker import so settings and the engine pick it up.
"""
import os
import tempfile
import uuid

_DB_DIR = tempfile.mkdtemp(prefix="tracker-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'tracker_test.db')}"
os.environ["ENV"] = "development"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["API_PREFIX"] = "/api/v1"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import tracker.models  # noqa: E402,F401
from tracker.database import Base, SessionLocal, engine  # noqa: E402
from tracker.main import app  # noqa: E402

API = "/api/v1"


@pytest.fixture(autouse=True)
def reset_db():
    """Fresh schema for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def register(client, role="user", name=None, email=None, password="secret123"):
    """Register through the API; return the response body's data (user + token)."""
    email = email or f"{role}-{uuid.uuid4().hex[:8]}@example.com"
    r = client.post(
        f"{API}/auth/register",
        json={"name": name or role.title(), "email": email, "password": password, "role": role},
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(client):
    return register(client, "user", name="Ada", email="ada@example.com")


@pytest.fixture
def admin(client):
    return register(client, "admin", name="Root", email="root@example.com")


@pytest.fixture
def user_headers(user):
    return bearer(user["token"])


@pytest.fixture
def admin_headers(admin):
    return bearer(admin["token"])


def create_topic(client, headers, name, description=None):
    body = {"name": name}
    if description is not None:
        body["description"] = description
    r = client.post(f"{API}/topics", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def create_subtopic(client, headers, topic_id, name, difficulty="easy", order=0, **extra):
    body = {"name": name, "topic": topic_id, "difficulty": difficulty, "order": order, **extra}
    r = client.post(f"{API}/subtopics", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.fixture
def catalog(client, admin_headers):
    """Two topics; 'Arrays' has easy/medium/tough subtopics, 'Graphs' has one easy subtopic."""
    arrays = create_topic(client, admin_headers, "Arrays", "Contiguous storage")
    graphs = create_topic(client, admin_headers, "Graphs", "Vertices and edges")
    subs = [
        create_subtopic(client, admin_headers, arrays["id"], "Two Pointers", "easy", 0),
        create_subtopic(client, admin_headers, arrays["id"], "Sliding Window", "medium", 1),
        create_subtopic(client, admin_headers, arrays["id"], "Prefix Sums", "tough", 2),
        create_subtopic(client, admin_headers, graphs["id"], "BFS", "easy", 0),
    ]
    return {"arrays": arrays, "graphs": graphs, "subtopics": subs}
