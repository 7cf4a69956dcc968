"""Pytest fixtures — file-backed SQLite database per test, recreated each time."""
from datetime import datetime, timezone, timedelta

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from fastapi.testclient import TestClient

from event_capacity.database import Base, get_db
from event_capacity.dependencies import Caller, Role
from event_capacity.main import app

# Import all models so they register with Base.metadata
from event_capacity.models.event import Event, EventStatus         # noqa: F401
from event_capacity.models.participation import Participation      # noqa: F401
from event_capacity.models.notification import Notification        # noqa: F401

SQLITE_URL = "sqlite:///./test.db"

ORGANIZER_ID = "organizer-1"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False, "timeout": 30})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory bound to the test engine, one session per thread in concurrency tests."""
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


class RecordingSink:
    """Notification sink that keeps messages in memory."""

    def __init__(self):
        self.sent = []

    def send(self, db, *, user_id, event_id, kind, message):
        self.sent.append({"user_id": user_id, "event_id": event_id, "kind": kind, "message": message})


class FailingSink:
    """Notification sink that is always down."""

    def __init__(self):
        self.attempts = 0

    def send(self, db, *, user_id, event_id, kind, message):
        self.attempts += 1
        raise ConnectionError("notification sink unavailable")


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def organizer():
    return Caller(user_id=ORGANIZER_ID, role=Role.ORGANIZER)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def make_event(db: Session, capacity: int = 2, starts_in: timedelta = timedelta(days=1),
               organizer_id: str = ORGANIZER_ID, name: str = "Pickup Basketball",
               status: EventStatus = EventStatus.active) -> Event:
    """Insert an event straight into the catalog table."""
    ev = Event(
        organizer_id=organizer_id,
        name=name,
        starts_at=datetime.now(timezone.utc) + starts_in,
        max_participants=capacity,
        status=status,
    )
    db.add(ev)
    db.commit()
    db.refresh(ev)
    return ev


def headers(user_id: str, role: str = "USER") -> dict:
    return {"X-User-Id": user_id, "X-User-Role": role}


def create_test_event(client: TestClient, capacity: int = 2, organizer_id: str = ORGANIZER_ID,
                      name: str = "Morning Run", starts_in_hours: int = 24) -> dict:
    """Helper — POST /api/events as an organizer and return response JSON."""
    start = datetime.now(timezone.utc) + timedelta(hours=starts_in_hours)
    resp = client.post("/api/events/", json={
        "name": name,
        "location": "Riverside Park",
        "starts_at": start.isoformat(),
        "max_participants": capacity,
    }, headers=headers(organizer_id, "ORGANIZER"))
    assert resp.status_code == 201, resp.text
    return resp.json()


def join(client: TestClient, event_id: str, user_id: str):
    return client.post(f"/api/events/{event_id}/join", headers=headers(user_id))


def leave(client: TestClient, event_id: str, user_id: str):
    return client.post(f"/api/events/{event_id}/leave", headers=headers(user_id))
