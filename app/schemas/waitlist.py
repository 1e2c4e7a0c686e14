from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.models.waitlist_entry import WaitlistEntry


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; they were written as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WaitlistSubmission(BaseModel):
    # Left loose on purpose: the admission engine reports field errors itself
    email: Any = None
    username: Any = None


class AdmissionData(BaseModel):
    twitter_handle: str = Field(..., alias="twitterHandle")
    position: int
    joined_at: datetime = Field(..., alias="joinedAt")
    estimated_access_date: datetime = Field(..., alias="estimatedAccessDate")

    class Config:
        populate_by_name = True


class SubmissionResponse(BaseModel):
    success: bool = True
    message: str = "Thank you for joining our waitlist!"
    data: AdmissionData


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    field: Optional[str] = None


class WaitlistEntryOut(BaseModel):
    id: str
    email: str
    twitter_handle: str = Field(..., alias="twitterHandle")
    joined_at: datetime = Field(..., alias="joinedAt")
    status: str
    position: int
    source: str
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True

    @classmethod
    def from_entry(cls, entry: WaitlistEntry) -> "WaitlistEntryOut":
        return cls(
            id=str(entry.id),
            email=entry.email,
            twitter_handle=entry.twitter_handle,
            joined_at=as_utc(entry.joined_at),
            status=entry.status.value,
            position=entry.position,
            source=entry.source,
            updated_at=as_utc(entry.updated_at),
        )


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class WaitlistListResponse(BaseModel):
    entries: List[WaitlistEntryOut]
    pagination: Pagination


class StatusUpdateRequest(BaseModel):
    id: Optional[str] = None
    status: Optional[str] = None


class ActionResponse(BaseModel):
    success: bool = True
    message: str


class WaitlistStatsResponse(BaseModel):
    total: int
    by_status: Dict[str, int]
    today: int
    timezone: str
