"""Pytest configuration and fixtures."""

import os

# Must be set before the app is imported; settings are cached on first use.
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from contactbook.config import get_settings  # noqa: E402
from contactbook.database import Base, get_db  # noqa: E402
from contactbook.main import app  # noqa: E402


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL when TEST_DATABASE_URL is set, SQLite otherwise
SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "testpass123"


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    from contactbook import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db, tmp_path):
    """Create a test client with database and upload dir overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    test_settings = get_settings().model_copy(update={"upload_dir": str(tmp_path / "uploads")})

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register_and_login(client, email: str, password: str = TEST_PASSWORD, name: str | None = None):
    """Sign up a user, log in, and return auth headers for them."""
    response = client.post(
        "/api/v1/users/signup",
        json={"email": email, "password": password, "name": name},
    )
    assert response.status_code == 201
    user_id = response.json()["id"]

    response = client.post("/api/v1/users/login", json={"email": email, "password": password})
    assert response.status_code == 200
    token = response.json()["token"]

    return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user_id, email=email)


@pytest.fixture
def register(client):
    """Factory fixture: sign up and log in a user, returning their auth headers."""

    def _register(email: str, password: str = TEST_PASSWORD, name: str | None = None):
        return register_and_login(client, email, password, name)

    return _register


@pytest.fixture
def auth_headers(register):
    """Create a user and return auth headers with user info."""
    return register("test@example.com", name="Test User")


@pytest.fixture
def other_auth_headers(register):
    """A second, unrelated user."""
    return register("other@example.com", name="Other User")


@pytest.fixture
def create_contact(client):
    """Factory that creates a contact through the API and returns its JSON."""

    def _create(headers, **fields):
        payload = {"name": "Alice", "email": "alice@example.com", "phone": "555-0100"}
        payload.update(fields)
        response = client.post("/api/v1/contacts", headers=headers, json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
