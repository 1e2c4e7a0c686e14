from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.database import Base, build_engine, get_db
from app.models.waitlist_entry import WaitlistEntry, WaitlistStatusEnum
from app.services.waitlist_store import WaitlistStore
from main import app

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def admin_headers():
    return {"X-API-Key": ADMIN_KEY}


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_KEY)
    monkeypatch.setattr(settings, "RESEND_API_KEY", "")
    monkeypatch.setattr(settings, "ADMIN_NOTIFY_EMAIL", "")
    monkeypatch.setattr(settings, "WAITLIST_SUBMIT_LIMIT_PER_MINUTE", 0)
    monkeypatch.setattr(settings, "ACCESS_BATCH_SIZE", 100)
    monkeypatch.setattr(settings, "ACCESS_BATCH_INTERVAL_DAYS", 7)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'waitlist.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def override_get_db(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def sent_notifications(monkeypatch):
    sent = []
    monkeypatch.setattr(
        "app.api.v1.endpoints.waitlist.send_admission_notifications",
        lambda email, handle, position: sent.append((email, handle, position)),
    )
    return sent


@pytest.fixture
def make_entry(db_session):
    """Insert an entry directly through the store with a controlled join time."""
    store = WaitlistStore(db_session)
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _make(n: int, status: WaitlistStatusEnum = WaitlistStatusEnum.PENDING, minutes: int = None) -> WaitlistEntry:
        entry = WaitlistEntry(
            email=f"user{n}@example.com",
            twitter_handle=f"user_{n}",
            handle_key=f"user_{n}",
            joined_at=base + timedelta(minutes=n if minutes is None else minutes),
            status=status,
            position=store.next_position(),
            source="direct",
        )
        return store.insert(entry)

    return _make
