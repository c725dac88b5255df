"""Shared fixtures: fake Mailgun transport, isolated settings and rate limiter."""

from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from portfolio_api.app import app
from portfolio_api.shared.config.settings import ContactSettings, get_settings
from portfolio_api.shared.contact.email_utils import EmailDispatcher, MailgunClient
from portfolio_api.shared.contact.rate_limit import ContactRateLimiter, InMemoryRateLimitStore
from portfolio_api.shared.contact.routes import get_email_dispatcher, get_rate_limiter
from portfolio_api.shared.contact.schemas import (
    ContactFormData,
    ContactInquiry,
    InquiryPriority,
)


class MailgunRecorder:
    """httpx.MockTransport handler that records every request it receives."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, text="Forbidden")
        return httpx.Response(self.status_code, json={"id": "<msg@mg.example.com>", "message": "Queued. Thank you."})


@pytest.fixture
def settings():
    return ContactSettings(
        mailgun_api_key="key-test",
        mailgun_domain="mg.example.com",
        notification_email="owner@example.com",
        from_email="noreply@example.com",
    )


@pytest.fixture
def mailgun():
    return MailgunRecorder()


@pytest.fixture
def mailgun_client(settings, mailgun):
    return MailgunClient(settings, transport=httpx.MockTransport(mailgun))


@pytest.fixture
def rate_limiter():
    return ContactRateLimiter(InMemoryRateLimitStore())


@pytest.fixture
def client(settings, mailgun_client, rate_limiter):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_email_dispatcher] = lambda: EmailDispatcher(settings, mailgun_client)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def valid_payload():
    return {
        "name": "Max Mustermann",
        "email": "max@test.de",
        "message": "Ich benötige eine neue Website für mein Café mit Online-Reservierung.",
        "projectType": "standard",
        "privacyConsent": True,
    }


def make_form(**overrides) -> ContactFormData:
    fields = {
        "name": "Max Mustermann",
        "email": "max@test.de",
        "message": "Ich benötige eine neue Website für mein Café mit Online-Reservierung.",
        "project_type": "standard",
        "privacy_consent": True,
    }
    fields.update(overrides)
    return ContactFormData(**fields)


@pytest.fixture
def form_factory():
    return make_form


@pytest.fixture
def form():
    return make_form()


@pytest.fixture
def inquiry():
    return ContactInquiry(
        name="Max Mustermann",
        email="max@test.de",
        company="Café Sonnenschein",
        phone="+49 30 1234567",
        project_type="standard",
        budget="10000-25000",
        timeline="1-month",
        message="Ich benötige eine neue Website\nmit Online-Reservierung für mein Café.",
        privacy_consent=True,
        marketing_consent=False,
        id="INQ-1760781600000-abc123xyz",
        submission_date=datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc),
        ip_address="203.0.113.7",
        user_agent="pytest",
        priority=InquiryPriority.URGENT,
        lead_score=100,
        tags=["project-standard", "website-form"],
    )
