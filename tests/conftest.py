# tests/conftest.py

from __future__ import annotations

import os

# config is read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import taskboard.models  # noqa: E402,F401
from taskboard.database import Base, get_db  # noqa: E402
from taskboard.main import create_app  # noqa: E402
from taskboard.storage.file_storage import FileStorage, get_storage  # noqa: E402

PASSWORD = "Secret123!"


@pytest.fixture()
def engine():
    """
    One in-memory SQLite database per test.

    StaticPool keeps a single connection so every session sees the same data.
    """
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def storage(tmp_path) -> FileStorage:
    return FileStorage(root=str(tmp_path / "storage"), bucket="task-attachments")


@pytest.fixture()
def app(session_factory, storage):
    application = create_app(configure_logging=False, create_tables=False)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = _get_db
    application.dependency_overrides[get_storage] = lambda: storage
    return application


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def register_and_login(client: TestClient, email: str) -> dict:
    resp = client.post(
        "/auth/register",
        json={"email": email, "password": PASSWORD, "confirm_password": PASSWORD},
    )
    assert resp.status_code == 201, resp.text
    resp = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture()
def auth_headers(client) -> dict:
    return register_and_login(client, "alice@taskboard.io")


@pytest.fixture()
def other_headers(client) -> dict:
    return register_and_login(client, "bob@taskboard.io")
