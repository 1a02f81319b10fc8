"""Pytest fixtures — in-memory SQLite database for fast, isolated tests."""
import os

os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date, datetime, time, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from showplanner.database import Base, configure_sqlite, get_db  # noqa: E402
from showplanner.main import app  # noqa: E402
from showplanner.models.show import RepeatPattern, Show, ShowStatus  # noqa: E402

# Fixed "now" for deterministic tests (a Wednesday)
NOW = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh in-memory SQLite engine for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def make_show(**overrides) -> Show:
    """Build an unsaved Show; enough for the pure calculator and generator."""
    fields = {
        "show_id": "show-1",
        "show_name": "Morning Stream",
        "timezone": "UTC",
        "start_time": time(19, 0),
        "length_minutes": 60,
        "first_event_date": date(2025, 1, 6),
        "repeat_pattern": RepeatPattern.weekly,
        "scheduling_config": None,
        "status": ShowStatus.active,
        "version": 1,
    }
    fields.update(overrides)
    return Show(**fields)


def create_test_show(client: TestClient, **overrides) -> dict:
    """Helper — POST /api/shows and return response JSON."""
    payload = {
        "show_name": "Test Show",
        "start_time": "19:00",
        "length_minutes": 60,
        "first_event_date": date.today().replace(day=1).isoformat(),
        "repeat_pattern": "daily",
    }
    payload.update(overrides)
    resp = client.post("/api/shows/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()
