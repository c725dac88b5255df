"""Tests for GDPR consent records and privacy texts."""

from datetime import datetime, timezone

import pytest

from portfolio_api.shared.privacy.consent import (
    PRIVACY_POLICY_VERSION,
    Language,
    LawfulBasis,
    create_consent_record,
    generate_data_processing_summary,
    get_consent_withdrawal_instructions,
    get_privacy_notice_text,
    is_consent_valid,
    validate_gdpr_compliance,
)


class TestConsentRecord:
    def test_record_for_inquiry(self, form, inquiry):
        record = create_consent_record(form, inquiry)
        assert record.id == "consent-INQ-1760781600000-abc123xyz"
        assert record.timestamp == inquiry.submission_date
        assert record.lawful_basis == LawfulBasis.CONSENT
        assert record.purpose == ["contact-response", "project-evaluation"]
        assert record.data_types == [
            "name", "email", "communication-content", "project-requirements", "ip-address", "browser-data",
        ]
        assert record.retention_period == "3 years"
        assert record.version == PRIVACY_POLICY_VERSION

    def test_marketing_consent_and_optional_data(self, form_factory, inquiry):
        form = form_factory(marketing_consent=True, company="ACME GmbH", phone="+49 30 1234567")
        record = create_consent_record(form, inquiry)
        assert "marketing-communication" in record.purpose
        assert {"company", "phone"} <= set(record.data_types)


class TestConsentValidity:
    def test_recent_consent_is_valid(self, form, inquiry):
        record = create_consent_record(form, inquiry)
        assert is_consent_valid(record, now=datetime(2026, 11, 1, tzinfo=timezone.utc)).valid

    def test_old_marketing_consent_needs_renewal(self, form_factory, inquiry):
        record = create_consent_record(form_factory(marketing_consent=True), inquiry)
        result = is_consent_valid(record, now=datetime(2029, 1, 1, tzinfo=timezone.utc))
        assert not result.valid
        assert result.renewal_required
        assert result.reason == "Marketing consent older than 2 years"

    def test_old_privacy_only_consent_stays_valid(self, form, inquiry):
        record = create_consent_record(form, inquiry)
        assert is_consent_valid(record, now=datetime(2029, 1, 1, tzinfo=timezone.utc)).valid

    def test_outdated_policy_version(self, form, inquiry):
        record = create_consent_record(form, inquiry).model_copy(update={"version": "2024-06-01"})
        result = is_consent_valid(record, now=datetime(2026, 11, 1, tzinfo=timezone.utc))
        assert not result.valid
        assert result.reason == "Privacy policy significantly updated"

    def test_recent_policy_version_change_is_tolerated(self, form, inquiry):
        record = create_consent_record(form, inquiry).model_copy(update={"version": "2024-12-01"})
        assert is_consent_valid(record, now=datetime(2026, 11, 1, tzinfo=timezone.utc)).valid


class TestGDPRCompliance:
    def test_compliant_submission(self, valid_payload):
        result = validate_gdpr_compliance({**valid_payload, "marketingConsent": False})
        assert result.compliant
        assert result.recommendations == []

    def test_missing_consent_and_email(self):
        result = validate_gdpr_compliance({"privacyConsent": False})
        assert not result.compliant
        assert result.issues == ["Privacy consent not given", "Email required for lawful processing"]

    def test_recommendations(self, valid_payload):
        result = validate_gdpr_compliance({**valid_payload, "company": "x" * 101})
        assert result.compliant
        assert result.recommendations == [
            "Separate marketing consent checkbox recommended",
            "Company name should be limited for data minimization",
        ]


def test_data_processing_summary(form_factory):
    summary = generate_data_processing_summary(form_factory(marketing_consent=True, phone="+49 30 1234567"))
    assert [p.purpose for p in summary.purposes] == [
        "contact-response", "project-evaluation", "marketing-communication",
    ]
    assert summary.purposes[-1].retention == "Until withdrawn"
    assert summary.data_types == ["name", "email", "communication-content", "phone"]
    assert "Mailgun (Email Service Provider)" in summary.recipients


@pytest.mark.parametrize("language, marker", [(Language.DE, "DSGVO"), (Language.EN, "GDPR")])
def test_privacy_notice_text(language, marker):
    notice = get_privacy_notice_text(language)
    assert set(notice) == {"required", "marketing", "data_controller", "rights"}
    assert marker in notice["required"]


def test_withdrawal_instructions_are_copies():
    instructions = get_consent_withdrawal_instructions("de")
    assert instructions["email"] == "hallo@aykutspohr.de"
    assert len(instructions["rights"]) == 7
    instructions["rights"].clear()
    assert len(get_consent_withdrawal_instructions(Language.DE)["rights"]) == 7
