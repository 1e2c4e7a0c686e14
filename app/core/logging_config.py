import logging
import sys

from app.core.config import settings


def configure_logging() -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Configure audit logger (JSON lines)
    audit_logger = logging.getLogger("audit")
    if not audit_logger.handlers:
        handler = logging.StreamHandler()
        # Keep raw JSON line without extra prefixes
        handler.setFormatter(logging.Formatter("%(message)s"))
        audit_logger.addHandler(handler)
    audit_logger.setLevel(logging.INFO)
    # Do not propagate to root to avoid duplication
    audit_logger.propagate = False
