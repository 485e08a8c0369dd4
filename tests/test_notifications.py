"""Tests for password reset delivery."""

from unittest.mock import MagicMock, patch

import pytest

from contactbook.config import get_settings
from contactbook.services.notification_service import NotificationService
from contactbook.tasks.password_reset import send_password_reset_email


def make_settings(**overrides):
    return get_settings().model_copy(update=overrides)


class TestNotificationService:
    """Tests for NotificationService."""

    def test_not_configured_skips_send(self):
        service = NotificationService(make_settings(smtp_host=None))
        with patch("contactbook.services.notification_service.smtplib.SMTP") as mock_smtp:
            assert service.send_password_reset("a@x.com", "tok") is False
        mock_smtp.assert_not_called()

    def test_sends_via_smtp(self):
        service = NotificationService(
            make_settings(
                smtp_host="mail.local",
                smtp_port=2525,
                smtp_username="user",
                smtp_password="pw",
            )
        )
        with patch("contactbook.services.notification_service.smtplib.SMTP") as mock_smtp:
            smtp = mock_smtp.return_value.__enter__.return_value
            assert service.send_password_reset("a@x.com", "tok-123") is True

        mock_smtp.assert_called_once_with("mail.local", 2525, timeout=30)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("user", "pw")
        message = smtp.send_message.call_args.args[0]
        assert message["To"] == "a@x.com"
        assert "tok-123" in message.get_content()

    def test_message_uses_frontend_link(self):
        service = NotificationService(make_settings(frontend_url="https://app.example.com/"))
        message = service.build_password_reset_message("a@x.com", "tok-123")
        body = message.get_content()
        assert "https://app.example.com/reset-password?token=tok-123" in body
        assert "15 minutes" in body


class TestPasswordResetTask:
    """Tests for the Celery delivery task."""

    def test_task_reports_delivery(self):
        with patch("contactbook.tasks.password_reset.NotificationService") as mock_service:
            mock_service.return_value.send_password_reset.return_value = True
            result = send_password_reset_email.run("a@x.com", "tok")

        assert result == {"sent": True}
        mock_service.return_value.send_password_reset.assert_called_once_with("a@x.com", "tok")

    def test_task_retries_on_smtp_error(self):
        import smtplib

        with (
            patch("contactbook.tasks.password_reset.NotificationService") as mock_service,
            patch.object(send_password_reset_email, "retry", MagicMock(side_effect=RuntimeError)),
        ):
            mock_service.return_value.send_password_reset.side_effect = smtplib.SMTPException("down")
            with pytest.raises(RuntimeError):
                send_password_reset_email.run("a@x.com", "tok")
