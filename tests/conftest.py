"""
Pytest configuration and shared fixtures.
"""

import os

# keep the module-level engine off the real database file
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.pop("BACKEND_URL", None)

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobboard_api.backends.sql import SqlBackend
from jobboard_api.db import build_engine, init_db
from jobboard_api.deps import get_db
from jobboard_api.main import app
from jobboard_api.models import JobORM

EMPLOYER_ID = "employer-1"
BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def backend(db_session):
    return SqlBackend(db_session)


@pytest.fixture
def make_job(db_session):
    """Insert a job; ``age_days`` pushes created_at into the past."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        age_days = overrides.pop("age_days", n)
        data = {
            "id": f"job-{n:03d}",
            "employer_id": EMPLOYER_ID,
            "title": f"Job {n}",
            "company": "Acme",
            "location": "Berlin, Germany",
            "type": "full-time",
            "category": "Technology",
            "experience_level": "mid",
            "salary_min": None,
            "salary_max": None,
            "currency": "$",
            "description": "<p>Build things.</p>",
            "requirements": "Python",
            "featured": False,
            "status": "active",
            "created_at": BASE_TIME - timedelta(days=age_days),
        }
        data.update(overrides)
        job = JobORM(**data)
        db_session.add(job)
        db_session.commit()
        return job

    return _make


@pytest.fixture
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signed_up(client):
    """Create an account through the API and return its auth headers."""

    def _sign_up(email: str, role: str = "candidate", **extra):
        resp = client.post(
            "/auth/signup",
            json={"email": email, "password": "s3cret-pass", "role": role, **extra},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body["profile"]

    return _sign_up
