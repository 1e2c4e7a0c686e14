import logging
from html import escape

import resend
from app.core.config import settings

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(RuntimeError):
    """Raised when no Resend API key is configured."""


class EmailService:
    def __init__(self):
        resend.api_key = settings.RESEND_API_KEY
        self.sender = settings.EMAIL_FROM
        self.configured = bool(settings.RESEND_API_KEY)

    def _send(self, to: str, subject: str, text: str, html: str) -> str:
        if not self.configured:
            raise EmailNotConfiguredError("RESEND_API_KEY is not set")
        response = resend.Emails.send({
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "text": text,
            "html": html,
        })
        return response.get("id", "") if isinstance(response, dict) else ""

    def send_waitlist_confirmation(self, to: str, handle: str, position: int) -> str:
        subject = "✅ Welcome to the waitlist!"
        text = (
            f"Hi {handle},\n\n"
            f"Thanks for joining the waitlist! You are currently #{position}.\n\n"
            "We'll let you know when you get early access.\n\n"
            "Best,\nThe Team"
        )
        safe_handle = escape(handle)
        html = f"""
        <div style='font-family: Inter, Arial, sans-serif; line-height:1.6;'>
            <p>Hi {safe_handle},</p>
            <p>Thanks for joining the waitlist! You are currently <strong>#{position}</strong>.</p>
            <p>We'll let you know when you get early access.</p>
            <p>Best,<br>The Team</p>
        </div>
        """
        return self._send(to, subject, text, html)

    def send_signup_alert(self, to: str, email: str, handle: str, position: int) -> str:
        subject = f"New waitlist signup #{position}"
        text = f"{handle} ({email}) joined the waitlist at position #{position}."
        html = (
            f"<p><b>New waitlist signup</b></p>"
            f"<p>Handle: {escape(handle)}<br>Email: {escape(email)}<br>Position: #{position}</p>"
        )
        return self._send(to, subject, text, html)
