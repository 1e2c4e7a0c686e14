import csv
import logging
import math
from datetime import datetime, time, timedelta, timezone
from io import StringIO
from typing import Any, Dict, Optional

import pytz
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidStatusError, NotFoundError
from app.models.waitlist_entry import WaitlistEntry, WaitlistStatusEnum
from app.services.waitlist_store import WaitlistStore
from app.utils.audit import audit

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50

EXPORT_COLUMNS = ["Position", "Twitter Handle", "Email", "Status", "Source", "Joined At", "Updated At"]


def parse_status(value: Any) -> WaitlistStatusEnum:
    if isinstance(value, WaitlistStatusEnum):
        return value
    try:
        return WaitlistStatusEnum(value)
    except ValueError:
        raise InvalidStatusError()


class AdminWaitlistService:
    """Admin listing, status changes and deletion of waitlist entries."""

    def __init__(self, db: Session):
        self.store = WaitlistStore(db)

    def list_entries(
        self,
        status: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        page = page or DEFAULT_PAGE
        limit = limit or DEFAULT_LIMIT
        status_filter = parse_status(status) if status else None

        total = self.store.count(status_filter)
        entries = self.store.find_many(status=status_filter, skip=(page - 1) * limit, limit=limit)
        return {
            "entries": entries,
            "total": total,
            "page": page,
            "limit": limit,
            "page_count": math.ceil(total / limit),
        }

    def get_entry(self, entry_id: Any) -> WaitlistEntry:
        entry = self.store.find_by_id(entry_id)
        if entry is None:
            raise NotFoundError()
        return entry

    def update_status(self, entry_id: Any, status: Any) -> None:
        new_status = parse_status(status)
        updated = self.store.update_one(
            entry_id,
            {"status": new_status, "updated_at": datetime.now(timezone.utc)},
        )
        if not updated:
            raise NotFoundError()
        audit("WAITLIST_STATUS_UPDATED", entry_id=str(entry_id), status=new_status.value)

    def remove(self, entry_id: Any) -> None:
        if not self.store.delete_one(entry_id):
            raise NotFoundError()
        audit("WAITLIST_ENTRY_DELETED", entry_id=str(entry_id))

    def stats(self, tz: str = "UTC") -> Dict[str, Any]:
        """Totals per status plus signups since local midnight in ``tz``."""
        try:
            zone = pytz.timezone(tz)
        except pytz.UnknownTimeZoneError:
            logger.warning("Unknown timezone %r, falling back to UTC", tz)
            zone = pytz.UTC

        local_midnight = zone.localize(datetime.combine(datetime.now(zone).date(), time.min))
        start_utc = local_midnight.astimezone(pytz.UTC)
        end_utc = start_utc + timedelta(days=1)

        by_status = self.store.count_by_status()
        return {
            "total": sum(by_status.values()),
            "by_status": {s.value: by_status.get(s, 0) for s in WaitlistStatusEnum},
            "today": self.store.count_joined_between(start_utc, end_utc),
            "timezone": zone.zone,
        }

    def export_csv(self) -> str:
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(EXPORT_COLUMNS)
        for e in self.store.find_many(newest_first=False):
            writer.writerow([
                e.position,
                e.twitter_handle,
                e.email,
                e.status.value,
                e.source,
                e.joined_at.isoformat() if e.joined_at else "",
                e.updated_at.isoformat() if e.updated_at else "",
            ])
        return output.getvalue()
