import uuid

import pytest
from sqlalchemy.orm import sessionmaker

from app.core.database import build_engine
from app.core.exceptions import UnavailableError
from app.models.waitlist_entry import WaitlistStatusEnum
from app.services.waitlist_store import WaitlistStore, parse_entry_id


def test_parse_entry_id():
    uid = uuid.uuid4()
    assert parse_entry_id(uid) == uid
    assert parse_entry_id(str(uid)) == uid
    assert parse_entry_id("nope") is None
    assert parse_entry_id(None) is None


def test_next_position_is_monotonic(db_session):
    store = WaitlistStore(db_session)
    values = [store.next_position() for _ in range(5)]
    db_session.commit()
    assert values == [1, 2, 3, 4, 5]


def test_next_position_rolls_back_with_transaction(db_session):
    store = WaitlistStore(db_session)
    assert store.next_position() == 1
    db_session.commit()

    assert store.next_position() == 2
    db_session.rollback()

    assert store.next_position() == 2


def test_count_and_find_many(db_session, make_entry):
    make_entry(1, status=WaitlistStatusEnum.APPROVED)
    make_entry(2)
    make_entry(3, status=WaitlistStatusEnum.APPROVED)
    store = WaitlistStore(db_session)

    assert store.count() == 3
    assert store.count(WaitlistStatusEnum.APPROVED) == 2
    assert [e.position for e in store.find_many(WaitlistStatusEnum.APPROVED)] == [3, 1]
    assert [e.position for e in store.find_many(skip=1, limit=1)] == [2]
    assert [e.position for e in store.find_many(newest_first=False)] == [1, 2, 3]


def test_update_and_delete_unknown_ids(db_session):
    store = WaitlistStore(db_session)
    assert store.update_one(uuid.uuid4(), {"status": WaitlistStatusEnum.APPROVED}) is False
    assert store.update_one("garbage", {"status": WaitlistStatusEnum.APPROVED}) is False
    assert store.delete_one(uuid.uuid4()) is False
    assert store.find_by_id("garbage") is None


def test_unreachable_database_is_unavailable(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'missing' / 'waitlist.db'}")
    db = sessionmaker(bind=engine)()
    try:
        with pytest.raises(UnavailableError):
            WaitlistStore(db).count()
        with pytest.raises(UnavailableError):
            WaitlistStore(db).find_by_email("a@x.com")
    finally:
        db.close()
        engine.dispose()
