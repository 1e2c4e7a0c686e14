import secrets

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import RateLimitedError, UnauthorizedError
from app.services.admin_waitlist_service import AdminWaitlistService
from app.services.waitlist_service import WaitlistService
from app.utils import rate_limiter


def require_admin_key(x_api_key: str | None = Header(default=None)) -> None:
    """Reject the request unless X-API-Key matches the configured admin secret."""
    expected = settings.ADMIN_API_KEY
    if not expected or not x_api_key or not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        raise UnauthorizedError()


def enforce_submit_rate_limit(request: Request) -> None:
    client_ip = request.client.host if request.client else "unknown"
    if not rate_limiter.allow_submission(client_ip):
        raise RateLimitedError()


def get_waitlist_service(db: Session = Depends(get_db)) -> WaitlistService:
    return WaitlistService(db)


def get_admin_waitlist_service(db: Session = Depends(get_db)) -> AdminWaitlistService:
    return AdminWaitlistService(db)
