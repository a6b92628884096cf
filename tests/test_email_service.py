"""
Email Service Tests
"""

from datetime import datetime
from unittest.mock import patch, MagicMock

from travel_expense.services.email_service import EmailService


REQUEST_DATA = {
    "label": "Travel Request",
    "summary": "to <Paris>",
    "details": [("Destination", "<Paris>"), ("Estimated Cost", "$900.00")],
}


def configured_service():
    service = EmailService()
    service.smtp_username = "mailer@acme-corp.com"
    service.smtp_password = "secret"
    service.from_email = "mailer@acme-corp.com"
    service.is_configured = True
    return service


class TestEmailService:
    """SMTP delivery"""

    def test_unconfigured_service_skips_sending(self):
        service = EmailService()

        with patch("travel_expense.services.email_service.smtplib.SMTP") as mock_smtp:
            assert service.send_submission_confirmation("sam@acme-corp.com", "Sam", REQUEST_DATA) is False
            mock_smtp.assert_not_called()

    def test_review_outcome_sent(self):
        service = configured_service()

        with patch("travel_expense.services.email_service.smtplib.SMTP") as mock_smtp:
            server = MagicMock()
            mock_smtp.return_value.__enter__.return_value = server

            sent = service.send_review_outcome(
                "sam@acme-corp.com", "Sam", REQUEST_DATA, "Rejected", "Ada Admin", "Admin",
                comments="Use the train", reviewed_at=datetime(2031, 1, 2, 3, 4, 5)
            )

        assert sent is True
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer@acme-corp.com", "secret")
        message = server.send_message.call_args.args[0]
        assert message["To"] == "sam@acme-corp.com"
        assert message["Subject"] == "Your Travel Request has been Rejected"

        text_part, html_part = message.get_payload()
        text = text_part.get_payload()
        assert "Remarks: Use the train" in text
        assert "02-01-2031 03:04:05" in text
        assert "&lt;Paris&gt;" in html_part.get_payload()

    def test_smtp_failure_returns_false(self):
        service = configured_service()

        with patch("travel_expense.services.email_service.smtplib.SMTP", side_effect=OSError("unreachable")):
            assert service.send_manager_heads_up("maria@acme-corp.com", "Maria", "Sam", REQUEST_DATA) is False
