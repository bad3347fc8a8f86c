import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from notes_api import services
from notes_api.api import app
from notes_api.auth import get_db
from notes_api.database import Base
from notes_api.security import create_access_token


@pytest.fixture
def session_local(monkeypatch):
    """Provide an isolated in-memory database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(services, "SessionLocal", TestingSessionLocal)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestingSessionLocal
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture(scope="session", autouse=True)
def clear_registry():
    # Clear existing collectors to avoid duplicate metric registration during tests
    collectors = list(REGISTRY._collector_to_names)
    for collector in collectors:
        REGISTRY.unregister(collector)


@pytest.fixture
def client(session_local):
    return TestClient(app)


@pytest.fixture
def auth_headers(session_local):
    """Create an admin account and return a bearer header for it."""
    services.create_user("admin", "admin-pass", ["Admin"])
    token = create_access_token("admin", ["Admin"])
    return {"Authorization": f"Bearer {token}"}
