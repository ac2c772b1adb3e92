"""
Shared test fixtures — SQLite test database, test client, sign-in helpers.
"""

import os
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set JWT_SECRET before importing app modules
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from leocalc.auth import AccessPolicy, get_access_policy, get_magic_link_sender, hash_access_code
from leocalc.database import Base, get_db
from leocalc.main import app


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

AUTHORIZED_EMAIL = "ops@leopack.in"
ACCESS_CODE = "shopfloor-2026"
ACCESS_CODE_HASH = hash_access_code(ACCESS_CODE)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


class CapturingSender:
    """Collects magic links instead of delivering them."""

    def __init__(self):
        self.sent = []

    def send(self, email, link):
        self.sent.append((email, link))

    def last_token(self):
        _, link = self.sent[-1]
        return parse_qs(urlparse(link).query)["token"][0]


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def policy():
    """Fresh access policy per test: one authorized email, one access code."""
    test_policy = AccessPolicy([AUTHORIZED_EMAIL], [ACCESS_CODE_HASH])
    app.dependency_overrides[get_access_policy] = lambda: test_policy
    yield test_policy
    app.dependency_overrides.pop(get_access_policy, None)


@pytest.fixture(autouse=True)
def outbox():
    sender = CapturingSender()
    app.dependency_overrides[get_magic_link_sender] = lambda: sender
    yield sender
    app.dependency_overrides.pop(get_magic_link_sender, None)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tokens(client, outbox):
    """Sign in the authorized email through the magic-link flow."""
    response = client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL})
    assert response.status_code == 200
    response = client.post("/api/auth/verify", json={"token": outbox.last_token()})
    assert response.status_code == 200
    return response.json()


@pytest.fixture
def auth_headers(tokens):
    return {"Authorization": f"Bearer {tokens['access_token']}"}
