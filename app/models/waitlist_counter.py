from sqlalchemy import Column, String, Integer
from app.core.database import Base

POSITION_COUNTER = "position"


class WaitlistCounter(Base):
    """Named monotonic sequence, incremented atomically in place."""
    __tablename__ = "waitlist_counters"

    name = Column(String(64), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
