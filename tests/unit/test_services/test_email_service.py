import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import BackgroundTasks
from mealplannr.services.email_service import BackgroundMailer, EmailService


def _make_service(smtp_host=None):
    return EmailService(
        smtp_host=smtp_host,
        smtp_port=587,
        smtp_username="user",
        smtp_password="pass",
        from_email="noreply@test.com",
        from_name="Test App",
        use_tls=True
    )


@pytest.mark.unit
class TestEmailService:

    def test_is_configured(self):
        assert _make_service(None).is_configured is False
        assert _make_service("").is_configured is False
        assert _make_service("smtp.example.com").is_configured is True

    def test_unconfigured_send_is_skipped(self):
        with patch("mealplannr.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = asyncio.run(_make_service(None).send_email("a@b.com", "Subject", "hi"))

        assert result is False
        mock_send.assert_not_called()

    def test_configured_send(self):
        with patch("mealplannr.services.email_service.aiosmtplib.send", new_callable=AsyncMock) as mock_send:
            result = asyncio.run(_make_service("smtp.example.com").send_email("a@b.com", "Subject", "hi"))

        assert result is True
        message = mock_send.call_args.args[0]
        assert message["To"] == "a@b.com"
        assert message["From"] == "Test App <noreply@test.com>"
        assert mock_send.call_args.kwargs["hostname"] == "smtp.example.com"

    def test_smtp_error_returns_false(self):
        with patch(
            "mealplannr.services.email_service.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=OSError("connection refused")
        ):
            result = asyncio.run(_make_service("smtp.example.com").send_email("a@b.com", "Subject", "hi"))

        assert result is False

    def test_background_mailer_queues_send(self):
        tasks = BackgroundTasks()
        service = _make_service(None)

        BackgroundMailer(tasks, service).send("a@b.com", "Subject", "hi")

        assert len(tasks.tasks) == 1
        assert tasks.tasks[0].func == service.send_email
        assert tasks.tasks[0].args == ("a@b.com", "Subject", "hi")
