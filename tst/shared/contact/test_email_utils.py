"""Tests for email building and Mailgun delivery."""

import asyncio
import base64
import re

import httpx

from portfolio_api.shared.config.settings import ContactSettings
from portfolio_api.shared.contact.email_utils import (
    CONFIRMATION_SUBJECT,
    NEXT_STEPS,
    EmailDispatcher,
    MailgunClient,
    OutboundEmail,
    build_confirmation_email,
    build_notification_email,
)
from portfolio_api.shared.contact.spam_detection import MessageQuality, SpamCheckResult


def _form_field(body: bytes, name: str) -> str:
    """Value of a multipart form field (part headers, blank line, value)."""
    pattern = rb'name="' + name.encode() + rb'"\r\n(?:[^\r\n]+\r\n)*\r\n([^\r\n]*)'
    return re.search(pattern, body).group(1).decode()


def _message():
    return OutboundEmail(
        from_address="Portfolio Website <noreply@example.com>",
        to="owner@example.com",
        subject="Neue Anfrage: Standard Website von Max Mustermann",
        html="<p>Hallo</p>",
        text="Hallo",
    )


class TestNotificationEmail:
    def test_addresses_and_subject(self, inquiry, settings):
        email = build_notification_email(inquiry, settings)
        assert email.to == "owner@example.com"
        assert email.from_address == "Portfolio Website <noreply@example.com>"
        assert email.subject == "Neue Anfrage: Standard Website von Max Mustermann"

    def test_lists_every_field(self, inquiry, settings):
        email = build_notification_email(inquiry, settings)
        for expected in (
            "Max Mustermann", "max@test.de", "Café Sonnenschein", "+49 30 1234567",
            "Standard Website", "10.000 € - 25.000 €", "1 Monat",
            "Lead Score: 100/100", "URGENT", "Erteilt", "Nicht erteilt",
            "INQ-1760781600000-abc123xyz",
        ):
            assert expected in email.text
            assert expected in email.html
        assert "#dc2626" in email.html
        assert "mit Online-Reservierung" in email.text

    def test_user_content_is_escaped_in_html(self, inquiry, settings):
        hostile = inquiry.model_copy(update={
            "message": "<script>alert('x')</script>\nZeile zwei",
            "company": "Evil & Co <b>",
        })
        email = build_notification_email(hostile, settings)
        assert "<script>" not in email.html
        assert "&lt;script&gt;alert(&#039;x&#039;)&lt;/script&gt;<br>Zeile zwei" in email.html
        assert "Evil &amp; Co &lt;b&gt;" in email.html

    def test_subject_is_single_line(self, inquiry, settings):
        sneaky = inquiry.model_copy(update={"name": "Max\nBcc: victim@example.com"})
        email = build_notification_email(sneaky, settings)
        assert "\n" not in email.subject

    def test_includes_review_hints(self, inquiry, settings):
        email = build_notification_email(
            inquiry,
            settings,
            quality=MessageQuality(score=45, factors=["Adequate message length"]),
            spam=SpamCheckResult(is_spam=True, reasons=["Suspicious email domain"]),
        )
        assert "Nachrichtenqualität: 45/100" in email.text
        assert "Spam-Verdacht: Suspicious email domain" in email.html


class TestConfirmationEmail:
    def test_confirmation_content(self, inquiry, settings):
        email = build_confirmation_email(inquiry, settings)
        assert email.to == "max@test.de"
        assert email.subject == CONFIRMATION_SUBJECT
        assert "Hallo Max Mustermann" in email.text
        assert "Standard Website" in email.html
        for number, step in enumerate(NEXT_STEPS, start=1):
            assert f"{number}. {step}" in email.text
            assert f"<li>{step}</li>" in email.html
        assert "owner@example.com" in email.text
        assert "tel:+4917612345678" in email.html
        assert "INQ-1760781600000-abc123xyz" in email.html


class TestMailgunClient:
    def test_posts_multipart_form_with_basic_auth(self, mailgun_client, mailgun):
        result = asyncio.run(mailgun_client.send(_message()))

        assert result.sent
        assert result.status_code == 200
        request = mailgun.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.mailgun.net/v3/mg.example.com/messages"
        expected = base64.b64encode(b"api:key-test").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        body = request.read()
        for field in (b'name="from"', b'name="to"', b'name="subject"', b'name="html"', b'name="text"'):
            assert field in body
        assert b"Neue Anfrage: Standard Website von Max Mustermann" in body

    def test_provider_error_is_reported(self, mailgun_client, mailgun):
        mailgun.status_code = 401
        result = asyncio.run(mailgun_client.send(_message()))
        assert not result.sent
        assert result.status_code == 401

    def test_network_error_is_reported(self, settings):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = MailgunClient(settings, transport=httpx.MockTransport(fail))
        result = asyncio.run(client.send(_message()))
        assert not result.sent
        assert "connection refused" in result.error

    def test_missing_configuration_skips_request(self, mailgun):
        client = MailgunClient(ContactSettings(), transport=httpx.MockTransport(mailgun))
        result = asyncio.run(client.send(_message()))
        assert not result.sent
        assert mailgun.requests == []

    def test_custom_api_base_url(self, settings, mailgun):
        eu_settings = settings.model_copy(update={"mailgun_api_base_url": "https://api.eu.mailgun.net/v3/"})
        client = MailgunClient(eu_settings, transport=httpx.MockTransport(mailgun))
        asyncio.run(client.send(_message()))
        assert str(mailgun.requests[0].url) == "https://api.eu.mailgun.net/v3/mg.example.com/messages"


class TestEmailDispatcher:
    def test_sends_both_emails(self, inquiry, settings, mailgun_client, mailgun):
        result = asyncio.run(EmailDispatcher(settings, mailgun_client).dispatch(inquiry))
        assert result.notification.sent and result.confirmation.sent
        recipients = sorted(_form_field(r.read(), "to") for r in mailgun.requests)
        assert recipients == ["max@test.de", "owner@example.com"]

    def test_failures_are_returned_not_raised(self, inquiry, settings, mailgun_client, mailgun):
        mailgun.status_code = 500
        result = asyncio.run(EmailDispatcher(settings, mailgun_client).dispatch(inquiry))
        assert not result.notification.sent
        assert not result.confirmation.sent
        assert len(mailgun.requests) == 2
