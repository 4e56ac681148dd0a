"""Pytest configuration to ensure local testing defaults."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# During pytest runs we force SQLAlchemy to use a local sqlite database so that tests
# do not require a running PostgreSQL server.
default_sqlite_url = f"sqlite:///{(BACKEND_DIR / 'tests' / 'test_orderflow.db').resolve().as_posix()}"
os.environ.setdefault("DATABASE_URL", default_sqlite_url)

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from orderflow.config import get_settings  # noqa: E402
from orderflow.database import Base, get_db  # noqa: E402
from orderflow.main import app  # noqa: E402

settings = get_settings()
engine = create_engine(
    settings.get_database_url(),
    connect_args={"check_same_thread": False},
    pool_pre_ping=True,
    future=True,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def actor_headers(actor_id, name: str, role: str) -> dict:
    return {"X-Actor-Id": str(actor_id), "X-Actor-Name": name, "X-Actor-Role": role}


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return actor_headers("admin-1", "Admin MUF", "admin")


@pytest.fixture
def program(client, admin_headers):
    payload = {
        "nama_program": "Toyota Reguler",
        "jenis_pembiayaan": "Passenger",
        "merk": "Toyota",
        "tdp_persen": 20,
        "tenor_bunga": [
            {"tenor": 36, "bunga": 5},
            {"tenor": 12, "bunga": 4.5},
            {"tenor": 24, "bunga": 5},
            {"tenor": 48, "bunga": 6, "is_active": False},
        ],
    }
    response = client.post("/programs/", json=payload, headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def team(client, admin_headers):
    """One user per workflow role, keyed by role."""
    members = {}
    for role, name in (("sales", "Budi Sales"), ("cmo", "Citra CMO"), ("cmh", "Dewi CMH")):
        response = client.post(
            "/users/",
            json={"username": role, "nama_lengkap": name, "role": role},
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        body = response.json()
        members[role] = actor_headers(body["id"], name, role)
    return members
