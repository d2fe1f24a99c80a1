import os

# Keep the app's own engine off Postgres during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from coffee_api.main import app
from coffee_api.routers.coffees import limiter
from coffee_api.db import Base, get_db

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

# check_same_thread is needed for SQLite; StaticPool shares the in-memory
# connection between the test session and the request sessions.
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """Test client with DB override and fresh rate-limit counters."""
    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup and assertions."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def coffee_payload():
    return {
        "name": "A great coffee",
        "brand": "Nescafe",
        "flavors": ["chocolate", "vanilla"],
    }


@pytest.fixture
def coffee(client, coffee_payload):
    """A coffee created through the API (id 1 on a fresh database)."""
    response = client.post("/coffees", json=coffee_payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]
