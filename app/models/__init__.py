# Import all models here for Alembic
from app.models.waitlist_entry import WaitlistEntry, WaitlistStatusEnum
from app.models.waitlist_counter import WaitlistCounter

__all__ = [
    "WaitlistEntry",
    "WaitlistStatusEnum",
    "WaitlistCounter",
]
