import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_logger = logging.getLogger("audit")


def _email_hash(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return hashlib.sha256(email.lower().encode()).hexdigest()[:12]


def audit(event: str, *, email: Optional[str] = None, entry_id: Optional[str] = None, **fields: Any) -> None:
    """Emit one JSON line per waitlist event.

    Emails are hashed so the audit stream carries no raw addresses.
    """
    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
    }
    if email:
        payload["email_hash"] = _email_hash(email)
    if entry_id:
        payload["entry_id"] = entry_id
    payload.update(fields)
    _logger.info(json.dumps(payload, ensure_ascii=False, default=str))
