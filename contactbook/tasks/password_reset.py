"""Celery task for delivering password reset tokens."""

import logging
import smtplib

from contactbook.celery_app import app as celery_app
from contactbook.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=30)
def send_password_reset_email(self, email: str, token: str) -> dict:
    """Email a reset token to the user.

    Args:
        email: Address of the account being reset
        token: Signed password-reset token

    Returns:
        dict with delivery status
    """
    service = NotificationService()
    try:
        sent = service.send_password_reset(email, token)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send password reset email: {e}")
        raise self.retry(exc=e) from e

    return {"sent": sent}
