import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from app.database.db import Base, get_db
from app.main import app
from app.models.events import Event, EventStatus
from app.models.hubs import Hub

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Give every test empty tables."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(monkeypatch: pytest.MonkeyPatch, fake_redis):
    """Route the per-event registration lock to fakeredis."""
    monkeypatch.setattr("app.services.registrations.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture(autouse=True)
def notification_task(monkeypatch: pytest.MonkeyPatch):
    """Capture enqueued notifications instead of talking to a broker."""
    task = Mock()
    monkeypatch.setattr("app.tasks.deliver_registration_notification", task)
    return task


@pytest.fixture
def now():
    return datetime.now(timezone.utc).replace(microsecond=0)


@pytest.fixture
def hub(db_session: Session) -> Hub:
    hub = Hub(
        name="Amsterdam",
        country="NL",
        timezone="Europe/Amsterdam",
        currency="EUR",
        deregistration_deadline_hours=24,
        waitlist_auto_promote_cutoff_hours=2,
        default_no_show_fee_amount=10.0,
        is_active=True,
    )
    db_session.add(hub)
    db_session.commit()
    db_session.refresh(hub)
    return hub


@pytest.fixture
def make_event(db_session: Session, hub: Hub, now: datetime):
    """Factory for published events a week after ``now``."""

    def _make_event(**overrides) -> Event:
        starts_at = overrides.pop("starts_at", now + timedelta(days=7))
        values = dict(
            hub_id=hub.id,
            title="Supper Club",
            host_name="Lotte",
            location_name="De Pijp",
            starts_at=starts_at,
            ends_at=starts_at + timedelta(hours=3),
            capacity=10,
            registered_count=0,
            waitlist_count=0,
            status=EventStatus.PUBLISHED.value,
        )
        values.update(overrides)
        event = Event(**values)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event
