"""
Tests for decision email content and delivery fallbacks.
"""

from datetime import date
from unittest.mock import patch

import pytest

from volugram.core import email
from volugram.core.email import (
    Attachment,
    build_accepted_email,
    build_rejected_email,
    format_mail_date,
    send_email,
)
from volugram.core.errors import UnsupportedLocaleError


class TestDecisionTemplates:
    def test_mail_date_has_no_padding(self):
        assert format_mail_date(date(2024, 1, 4)) == "4.1.2024"

    def test_accepted_english(self):
        subject, text = build_accepted_email("en", "Anna", "Well done", date(2024, 1, 4))

        assert subject == "Certificate Issuance (4.1.2024) by Anna"
        assert text == "Your submission has been accepted. Comment: Well done"

    def test_accepted_estonian(self):
        subject, _ = build_accepted_email("et", "Anna", "", date(2024, 1, 4))
        assert subject == "Sertifikaadi väljastamine (4.1.2024) Anna poolt"

    def test_rejected_german(self):
        subject, text = build_rejected_email("de", "Anna", "Zu kurz", date(2024, 12, 31))

        assert subject == "Abgelehnte Freiwilligen-Einreichung durch Anna 31.12.2024"
        assert text.endswith("Kommentar: Zu kurz")

    def test_every_language_has_both_templates(self):
        assert set(email.ACCEPTED_TEMPLATES) == set(email.REJECTED_TEMPLATES)
        assert len(email.ACCEPTED_TEMPLATES) == 4

    def test_unknown_language(self):
        with pytest.raises(UnsupportedLocaleError):
            build_rejected_email("sv", "Anna", "", date(2024, 1, 4))


class TestSendEmail:
    @pytest.mark.asyncio
    async def test_without_api_key_logs_instead(self):
        with (
            patch.object(email.resend, "api_key", None),
            patch.object(email.resend.Emails, "send") as mock_send,
        ):
            sent = await send_email("a@example.org", "Subject", text_content="Hi")

            assert sent is True
            mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_attachments_are_passed_as_byte_lists(self):
        with (
            patch.object(email.resend, "api_key", "re_test"),
            patch.object(email.resend.Emails, "send", return_value={"id": "abc"}) as mock_send,
        ):
            sent = await send_email(
                "a@example.org",
                "Subject",
                text_content="Hi",
                attachments=[Attachment(filename="certificate.pdf", content=b"\x01\x02")],
            )

            assert sent is True
            params = mock_send.call_args.args[0]
            assert params["to"] == ["a@example.org"]
            assert params["attachments"] == [{"filename": "certificate.pdf", "content": [1, 2]}]

    @pytest.mark.asyncio
    async def test_provider_failure_returns_false(self):
        with (
            patch.object(email.resend, "api_key", "re_test"),
            patch.object(email.resend.Emails, "send", side_effect=RuntimeError("down")),
        ):
            assert await send_email("a@example.org", "Subject", text_content="Hi") is False
