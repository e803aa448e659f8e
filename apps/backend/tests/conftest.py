"""
Shared pytest fixtures for the tracker test suite.

DATABASE_URL must point at a scratch SQLite file before anything under
`tracker` is imported, since the DB layer reads it at import time.
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

_TMP_DIR = Path(tempfile.mkdtemp(prefix="tracker-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'tracker.db'}"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tracker.db import Base, SessionLocal, engine  # noqa: E402
from tracker.models.event import Event  # noqa: E402
from tracker.routes.collect import get_sweeper  # noqa: E402
from tracker.services.retention import RetentionSweeper  # noqa: E402

from main import app  # noqa: E402


class FakeClock:
    """Settable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_session():
    """Fresh schema per test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def add_event(db_session):
    """
    Insert a stored event directly, optionally backdated.

    Example:
        add_event({"type": "pageview"}, age_days=90)
    """

    def _add_event(payload: dict, age_days: float = 0) -> Event:
        e = Event(
            payload=payload,
            created_at=datetime.now(timezone.utc) - timedelta(days=age_days),
        )
        db_session.add(e)
        db_session.commit()
        return e

    return _add_event


@pytest.fixture
def sweeper():
    return RetentionSweeper()


@pytest.fixture
def client(db_session, sweeper):
    app.dependency_overrides[get_sweeper] = lambda: sweeper
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
