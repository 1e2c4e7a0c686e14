"""Persistence adapter for waitlist entries.

Business logic talks to the database only through :class:`WaitlistStore`.
Every public method maps driver failures onto the application error
taxonomy: connection-level failures become ``UnavailableError`` and any
other SQLAlchemy failure becomes ``StorageError``. Both roll the session
back so no partial write survives.
"""
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import desc, func, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    DuplicateEmailError,
    DuplicateHandleError,
    StorageError,
    UnavailableError,
    WaitlistError,
)
from app.models.waitlist_counter import POSITION_COUNTER, WaitlistCounter
from app.models.waitlist_entry import WaitlistEntry, WaitlistStatusEnum
from app.utils.validators import handle_key

logger = logging.getLogger(__name__)


def parse_entry_id(entry_id: Any) -> Optional[uuid.UUID]:
    """Return the UUID for an id reference, or None when it cannot be one."""
    if isinstance(entry_id, uuid.UUID):
        return entry_id
    try:
        return uuid.UUID(str(entry_id))
    except (TypeError, ValueError):
        return None


class WaitlistStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except WaitlistError:
            raise
        except OperationalError as e:
            self._rollback_quietly()
            logger.error("Database unavailable during %s: %s", operation, e)
            raise UnavailableError() from e
        except SQLAlchemyError as e:
            self._rollback_quietly()
            logger.exception("Database error during %s", operation)
            raise StorageError() from e

    def _rollback_quietly(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            logger.warning("Rollback failed: %s", e)

    # Reads

    def find_one(self, **criteria: Any) -> Optional[WaitlistEntry]:
        with self._guard("find_one"):
            return self.db.query(WaitlistEntry).filter_by(**criteria).first()

    def find_by_id(self, entry_id: Any) -> Optional[WaitlistEntry]:
        uid = parse_entry_id(entry_id)
        if uid is None:
            return None
        return self.find_one(id=uid)

    def find_by_email(self, email: str) -> Optional[WaitlistEntry]:
        return self.find_one(email=email)

    def find_by_handle(self, handle: str) -> Optional[WaitlistEntry]:
        """Case-insensitive lookup on the normalized handle."""
        return self.find_one(handle_key=handle_key(handle))

    def find_many(
        self,
        status: Optional[WaitlistStatusEnum] = None,
        skip: int = 0,
        limit: Optional[int] = None,
        newest_first: bool = True,
    ) -> List[WaitlistEntry]:
        with self._guard("find_many"):
            query = self.db.query(WaitlistEntry)
            if status is not None:
                query = query.filter(WaitlistEntry.status == status)
            if newest_first:
                query = query.order_by(desc(WaitlistEntry.joined_at), desc(WaitlistEntry.position))
            else:
                query = query.order_by(WaitlistEntry.position)
            if skip:
                query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)
            return query.all()

    def count(self, status: Optional[WaitlistStatusEnum] = None) -> int:
        with self._guard("count"):
            query = self.db.query(func.count(WaitlistEntry.id))
            if status is not None:
                query = query.filter(WaitlistEntry.status == status)
            return int(query.scalar() or 0)

    def count_by_status(self) -> Dict[WaitlistStatusEnum, int]:
        with self._guard("count_by_status"):
            rows = (
                self.db.query(WaitlistEntry.status, func.count(WaitlistEntry.id))
                .group_by(WaitlistEntry.status)
                .all()
            )
            return {status: int(n) for status, n in rows}

    def count_joined_between(self, start, end) -> int:
        with self._guard("count_joined_between"):
            return int(
                self.db.query(func.count(WaitlistEntry.id))
                .filter(WaitlistEntry.joined_at >= start, WaitlistEntry.joined_at < end)
                .scalar()
                or 0
            )

    # Writes

    def _increment_position(self) -> Optional[int]:
        stmt = (
            update(WaitlistCounter)
            .where(WaitlistCounter.name == POSITION_COUNTER)
            .values(value=WaitlistCounter.value + 1)
            .returning(WaitlistCounter.value)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def next_position(self) -> int:
        """Atomically increment and return the position sequence.

        Runs inside the caller's transaction: the row stays locked until the
        caller commits, and a rollback returns the number to the sequence.
        The counter row is created on first use, seeded from the highest
        position already stored.
        """
        with self._guard("next_position"):
            value = self._increment_position()
            if value is not None:
                return value

            seed = self.db.query(func.max(WaitlistEntry.position)).scalar() or 0
            self.db.add(WaitlistCounter(name=POSITION_COUNTER, value=seed + 1))
            try:
                self.db.flush()
                return seed + 1
            except IntegrityError:
                # Another writer created the counter first
                self.db.rollback()

            value = self._increment_position()
            if value is None:
                raise StorageError()
            return value

    def insert(self, entry: WaitlistEntry) -> WaitlistEntry:
        """Insert and commit. Unique-key conflicts surface as duplicate errors."""
        with self._guard("insert"):
            self.db.add(entry)
            try:
                self.db.commit()
            except IntegrityError as e:
                self.db.rollback()
                raise self._conflict_for(entry) from e
            self.db.refresh(entry)
            return entry

    def _conflict_for(self, entry: WaitlistEntry) -> WaitlistError:
        if self.db.query(WaitlistEntry.id).filter(WaitlistEntry.email == entry.email).first():
            return DuplicateEmailError()
        if self.db.query(WaitlistEntry.id).filter(WaitlistEntry.handle_key == entry.handle_key).first():
            return DuplicateHandleError()
        logger.error("Integrity error on insert with no matching duplicate for position %s", entry.position)
        return StorageError()

    def update_one(self, entry_id: Any, values: Dict[str, Any]) -> bool:
        """Apply ``values`` to one entry. Returns False when nothing matched."""
        uid = parse_entry_id(entry_id)
        if uid is None:
            return False
        with self._guard("update_one"):
            matched = (
                self.db.query(WaitlistEntry)
                .filter(WaitlistEntry.id == uid)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
            return matched > 0

    def delete_one(self, entry_id: Any) -> bool:
        uid = parse_entry_id(entry_id)
        if uid is None:
            return False
        with self._guard("delete_one"):
            deleted = (
                self.db.query(WaitlistEntry)
                .filter(WaitlistEntry.id == uid)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return deleted > 0
