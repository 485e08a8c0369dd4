"""Notification service for out-of-band delivery (password reset email)."""

import logging
import smtplib
from email.message import EmailMessage

from contactbook.config import Settings, get_settings

logger = logging.getLogger(__name__)


class NotificationService:
    """Sends emails over SMTP when a mail server is configured."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def is_configured(self) -> bool:
        return self.settings.smtp_configured

    def build_password_reset_message(self, email: str, token: str) -> EmailMessage:
        """Compose the reset email. Includes a link when FRONTEND_URL is set."""
        minutes = self.settings.reset_token_minutes
        lines = [
            "A password reset was requested for your Contact Book account.",
            "",
        ]
        if self.settings.frontend_url:
            link = f"{self.settings.frontend_url.rstrip('/')}/reset-password?token={token}"
            lines.append(f"Reset your password here: {link}")
        else:
            lines.append(f"Your reset token is: {token}")
        lines += [
            "",
            f"This token expires in {minutes} minutes.",
            "If you did not request a reset, you can ignore this email.",
        ]

        message = EmailMessage()
        message["Subject"] = "Password Reset Request"
        message["From"] = self.settings.mail_from
        message["To"] = email
        message.set_content("\n".join(lines))
        return message

    def send_password_reset(self, email: str, token: str) -> bool:
        """Send the reset token to ``email``.

        Returns True if the message was handed to the mail server.
        """
        if not self.is_configured:
            logger.warning("SMTP not configured, password reset email not sent")
            return False

        message = self.build_password_reset_message(email, token)
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as smtp:
            if self.settings.smtp_use_tls:
                smtp.starttls()
            if self.settings.smtp_username and self.settings.smtp_password:
                smtp.login(self.settings.smtp_username, self.settings.smtp_password)
            smtp.send_message(message)

        logger.info("Sent password reset email")
        return True
