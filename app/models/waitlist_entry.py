import enum
import uuid
from sqlalchemy import Column, String, DateTime, Integer, Uuid, Enum as SQLEnum, UniqueConstraint
from app.core.database import Base
from app.utils.validators import MAX_EMAIL_LENGTH


class WaitlistStatusEnum(enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CONTACTED = "contacted"


DIRECT_SOURCE = "direct"


class WaitlistEntry(Base):
    __tablename__ = "waitlist_entries"

    id = Column(Uuid(), primary_key=True, default=uuid.uuid4)
    email = Column(String(MAX_EMAIL_LENGTH), nullable=False, index=True)
    twitter_handle = Column(String(15), nullable=False)
    # Lowercased handle; the unique constraint makes handles case-insensitively unique
    handle_key = Column(String(15), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(
        SQLEnum(WaitlistStatusEnum, name="waitliststatusenum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=WaitlistStatusEnum.PENDING,
        index=True,
    )
    position = Column(Integer, nullable=False, index=True)
    source = Column(String, nullable=False, default=DIRECT_SOURCE)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint('email', name='uq_waitlist_email'),
        UniqueConstraint('handle_key', name='uq_waitlist_handle_key'),
    )

    def __repr__(self):
        return f"<WaitlistEntry(position={self.position}, handle='{self.twitter_handle}', status='{self.status}')>"
