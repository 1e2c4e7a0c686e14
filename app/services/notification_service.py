import logging

from app.core.config import settings
from app.services.email_service import EmailNotConfiguredError, EmailService

logger = logging.getLogger(__name__)


class NotificationService:
    """Best-effort delivery after a successful admission.

    Nothing raised here reaches the caller and nothing is retried.
    """

    def __init__(self, email_service: EmailService = None):
        self.email = email_service or EmailService()

    def notify_admission(self, email: str, handle: str, position: int) -> None:
        try:
            message_id = self.email.send_waitlist_confirmation(email, handle, position)
            logger.info("Confirmation email sent to position #%s: %s", position, message_id)
        except EmailNotConfiguredError:
            logger.warning("Email transport is not configured; skipping confirmation for position #%s", position)
            return
        except Exception:
            logger.exception("Failed to send confirmation email for position #%s", position)

        if not settings.ADMIN_NOTIFY_EMAIL:
            return
        try:
            self.email.send_signup_alert(settings.ADMIN_NOTIFY_EMAIL, email, handle, position)
        except Exception:
            logger.exception("Failed to send signup alert for position #%s", position)


def send_admission_notifications(email: str, handle: str, position: int) -> None:
    """Entry point for background dispatch."""
    NotificationService().notify_admission(email, handle, position)
