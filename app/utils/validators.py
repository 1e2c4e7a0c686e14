"""Input checks for waitlist submissions. Pure functions, no I/O."""
import re
from typing import Any

# RFC 5321 path limit; also the column width
MAX_EMAIL_LENGTH = 320
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
# Twitter handles: letters, numbers and underscores, 3 to 15 characters
HANDLE_PATTERN = re.compile(r"[A-Za-z0-9_]{3,15}")


def validate_email(value: Any) -> bool:
    if not isinstance(value, str) or not value or len(value) > MAX_EMAIL_LENGTH:
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def normalize_handle(value: str) -> str:
    """Strip one leading '@'. Case is preserved."""
    return value[1:] if value.startswith("@") else value


def validate_handle(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    return HANDLE_PATTERN.fullmatch(normalize_handle(value)) is not None


def handle_key(value: str) -> str:
    """Key used for case-insensitive handle uniqueness."""
    return normalize_handle(value).lower()
