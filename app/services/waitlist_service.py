import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    DuplicateEmailError,
    DuplicateHandleError,
    InvalidEmailError,
    InvalidHandleError,
)
from app.models.waitlist_entry import DIRECT_SOURCE, WaitlistEntry, WaitlistStatusEnum
from app.services.waitlist_store import WaitlistStore
from app.utils.audit import audit
from app.utils.validators import handle_key, normalize_handle, validate_email, validate_handle

logger = logging.getLogger(__name__)


@dataclass
class AdmissionConfirmation:
    email: str
    twitter_handle: str
    position: int
    joined_at: datetime
    estimated_access_date: datetime


def estimated_access_date(position: int, joined_at: datetime) -> datetime:
    """ACCESS_BATCH_SIZE people get access every ACCESS_BATCH_INTERVAL_DAYS.

    Position 1..100 waits one interval, 101..200 two, and so on.
    """
    batches = math.ceil(position / settings.ACCESS_BATCH_SIZE)
    return joined_at + timedelta(days=batches * settings.ACCESS_BATCH_INTERVAL_DAYS)


class WaitlistService:
    """Turns a raw submission into a uniquely positioned waitlist entry."""

    def __init__(self, db: Session):
        self.store = WaitlistStore(db)

    def admit(self, email: Optional[str], raw_handle: Optional[str], source: Optional[str] = None) -> AdmissionConfirmation:
        email = email.strip() if isinstance(email, str) else email
        if not validate_email(email):
            raise InvalidEmailError()
        if not validate_handle(raw_handle):
            raise InvalidHandleError()

        twitter_handle = normalize_handle(raw_handle)

        if self.store.find_by_email(email):
            audit("WAITLIST_REJECTED", email=email, reason="duplicate_email")
            raise DuplicateEmailError()
        if self.store.find_by_handle(twitter_handle):
            audit("WAITLIST_REJECTED", email=email, reason="duplicate_handle")
            raise DuplicateHandleError()

        position = self.store.next_position()
        joined_at = datetime.now(timezone.utc)
        entry = WaitlistEntry(
            email=email,
            twitter_handle=twitter_handle,
            handle_key=handle_key(twitter_handle),
            joined_at=joined_at,
            status=WaitlistStatusEnum.PENDING,
            position=position,
            source=source or DIRECT_SOURCE,
        )
        entry = self.store.insert(entry)

        logger.info("Added to waitlist: %s at position %s", twitter_handle, position)
        audit("WAITLIST_JOINED", email=email, entry_id=str(entry.id), position=position, source=entry.source)

        return AdmissionConfirmation(
            email=email,
            twitter_handle=twitter_handle,
            position=position,
            joined_at=joined_at,
            estimated_access_date=estimated_access_date(position, joined_at),
        )
