"""
GDPR consent records and privacy notice texts for the contact form.
Processing of contact data is based on Art. 6 (1) (a) GDPR (consent).
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from portfolio_api.shared.contact.schemas import ContactFormData, ContactInquiry


PRIVACY_POLICY_VERSION = "2025-01-01"

DATA_RETENTION_PERIODS = {
    "contact-inquiries": "3 years",
    "marketing-consent": "Until withdrawn",
    "contract-data": "10 years",
    "analytics-data": "14 months",
    "logs": "30 days",
}

MARKETING_CONSENT_MAX_AGE_MONTHS = 24
POLICY_CHANGE_GRACE_DAYS = 90


class Language(str, Enum):
    DE = "de"
    EN = "en"


class LawfulBasis(str, Enum):
    CONSENT = "consent"
    CONTRACT = "contract"
    LEGAL_OBLIGATION = "legal-obligation"
    VITAL_INTERESTS = "vital-interests"
    PUBLIC_TASK = "public-task"
    LEGITIMATE_INTERESTS = "legitimate-interests"


class ConsentRecord(BaseModel):
    id: str
    timestamp: datetime
    email: str
    privacy_consent: bool
    marketing_consent: bool
    lawful_basis: LawfulBasis = LawfulBasis.CONSENT
    purpose: List[str]
    data_types: List[str]
    retention_period: str
    source: str = "contact-form"
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    consent_method: str = "explicit"
    language: Language = Language.DE
    version: str = PRIVACY_POLICY_VERSION


class ConsentValidity(BaseModel):
    valid: bool
    reason: Optional[str] = None
    renewal_required: bool = False


class GDPRComplianceResult(BaseModel):
    compliant: bool
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ProcessingPurpose(BaseModel):
    purpose: str
    lawful_basis: LawfulBasis
    retention: str


class DataProcessingSummary(BaseModel):
    purposes: List[ProcessingPurpose]
    data_types: List[str]
    recipients: List[str]
    transfers: List[str]


def create_consent_record(form: ContactFormData, inquiry: ContactInquiry) -> ConsentRecord:
    """Document the consent given with an accepted inquiry."""
    purposes = ["contact-response", "project-evaluation"]
    if form.marketing_consent:
        purposes.append("marketing-communication")

    data_types = ["name", "email", "communication-content", "project-requirements"]
    if form.company:
        data_types.append("company")
    if form.phone:
        data_types.append("phone")
    if inquiry.ip_address:
        data_types.append("ip-address")
    if inquiry.user_agent:
        data_types.append("browser-data")

    return ConsentRecord(
        id=f"consent-{inquiry.id}",
        timestamp=inquiry.submission_date,
        email=form.email,
        privacy_consent=form.privacy_consent,
        marketing_consent=form.marketing_consent,
        purpose=purposes,
        data_types=data_types,
        retention_period=DATA_RETENTION_PERIODS["contact-inquiries"],
        ip_address=inquiry.ip_address,
        user_agent=inquiry.user_agent,
    )


def validate_gdpr_compliance(data: Dict[str, Any]) -> GDPRComplianceResult:
    """Check a raw submission for consent and data minimization problems."""
    issues = []
    recommendations = []

    if data.get("privacyConsent") is not True:
        issues.append("Privacy consent not given")
    elif "marketingConsent" not in data:
        recommendations.append("Separate marketing consent checkbox recommended")

    if not data.get("email"):
        issues.append("Email required for lawful processing")

    company = data.get("company")
    if isinstance(company, str) and len(company) > 100:
        recommendations.append("Company name should be limited for data minimization")

    return GDPRComplianceResult(compliant=not issues, issues=issues, recommendations=recommendations)


def is_consent_valid(record: ConsentRecord, now: Optional[datetime] = None) -> ConsentValidity:
    """
    Decide whether a stored consent may still be relied on.

    Marketing consent must be renewed after MARKETING_CONSENT_MAX_AGE_MONTHS,
    and any consent given under a policy version more than
    POLICY_CHANGE_GRACE_DAYS older than the current one needs renewal.
    """
    now = now or datetime.now(timezone.utc)
    timestamp = record.timestamp
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    months_since_consent = (now - timestamp).total_seconds() / (60 * 60 * 24 * 30)

    if record.marketing_consent and months_since_consent > MARKETING_CONSENT_MAX_AGE_MONTHS:
        return ConsentValidity(
            valid=False,
            reason="Marketing consent older than 2 years",
            renewal_required=True,
        )

    if record.version != PRIVACY_POLICY_VERSION:
        version_diff = date.fromisoformat(PRIVACY_POLICY_VERSION) - date.fromisoformat(record.version)
        if version_diff.days > POLICY_CHANGE_GRACE_DAYS:
            return ConsentValidity(
                valid=False,
                reason="Privacy policy significantly updated",
                renewal_required=True,
            )

    return ConsentValidity(valid=True)


def generate_data_processing_summary(form: ContactFormData) -> DataProcessingSummary:
    retention = DATA_RETENTION_PERIODS["contact-inquiries"]
    purposes = [
        ProcessingPurpose(purpose="contact-response", lawful_basis=LawfulBasis.CONSENT, retention=retention),
        ProcessingPurpose(purpose="project-evaluation", lawful_basis=LawfulBasis.CONSENT, retention=retention),
    ]
    if form.marketing_consent:
        purposes.append(ProcessingPurpose(
            purpose="marketing-communication",
            lawful_basis=LawfulBasis.CONSENT,
            retention=DATA_RETENTION_PERIODS["marketing-consent"],
        ))

    data_types = ["name", "email", "communication-content"]
    if form.company:
        data_types.append("company")
    if form.phone:
        data_types.append("phone")

    return DataProcessingSummary(
        purposes=purposes,
        data_types=data_types,
        recipients=["Aykut Spohr (Data Controller)", "Mailgun (Email Service Provider)"],
        transfers=["EU/EEA"],
    )


PRIVACY_NOTICES = {
    Language.DE: {
        "required": (
            "Ich stimme der Verarbeitung meiner personenbezogenen Daten (Name, E-Mail-Adresse, Nachricht) "
            "zum Zweck der Kontaktaufnahme und Projektanfrage zu. Die Verarbeitung erfolgt auf Grundlage von "
            "Art. 6 Abs. 1 lit. a DSGVO (Einwilligung). Eine Weitergabe an Dritte erfolgt nicht."
        ),
        "marketing": (
            "Ja, ich möchte gelegentlich nützliche Tipps zu Webentwicklung und Angebote per E-Mail erhalten. "
            "Diese Einwilligung kann jederzeit durch eine E-Mail an hallo@aykutspohr.de oder über einen "
            "Abmeldelink in der E-Mail widerrufen werden."
        ),
        "data_controller": (
            "Verantwortlicher für die Datenverarbeitung: Aykut Spohr, Web Development, Berlin, Deutschland. "
            "Kontakt: hallo@aykutspohr.de"
        ),
        "rights": (
            "Sie haben das Recht auf Auskunft, Berichtigung, Löschung, Einschränkung der Verarbeitung, "
            "Datenübertragbarkeit und Widerspruch. Bei Beschwerden können Sie sich an eine "
            "Datenschutzaufsichtsbehörde wenden."
        ),
    },
    Language.EN: {
        "required": (
            "I consent to the processing of my personal data (name, email address, message) for the purpose "
            "of contact and project inquiry. Processing is based on Art. 6 para. 1 lit. a GDPR (consent). "
            "No data is shared with third parties."
        ),
        "marketing": (
            "Yes, I would like to occasionally receive useful web development tips and offers via email. "
            "This consent can be withdrawn at any time by sending an email to hello@aykutspohr.de or via an "
            "unsubscribe link in the email."
        ),
        "data_controller": (
            "Data controller: Aykut Spohr, Web Development, Berlin, Germany. Contact: hello@aykutspohr.de"
        ),
        "rights": (
            "You have the right to information, correction, deletion, restriction of processing, data "
            "portability and objection. In case of complaints, you can contact a data protection "
            "supervisory authority."
        ),
    },
}

WITHDRAWAL_INSTRUCTIONS = {
    Language.DE: {
        "email": "hallo@aykutspohr.de",
        "subject": "Widerruf der Einwilligung zur Datenverarbeitung",
        "body": (
            "Hiermit widerrufe ich meine Einwilligung zur Verarbeitung meiner personenbezogenen Daten. "
            "Bitte löschen Sie alle meine Daten und bestätigen Sie die Löschung.\n\n"
            "E-Mail-Adresse: [Ihre E-Mail-Adresse]\n"
            "Datum der ursprünglichen Anfrage: [Falls bekannt]\n\n"
            "Mit freundlichen Grüßen"
        ),
        "rights": [
            "Auskunft über verarbeitete Daten",
            "Berichtigung falscher Daten",
            "Löschung der Daten",
            "Einschränkung der Verarbeitung",
            "Datenübertragbarkeit",
            "Widerspruch gegen die Verarbeitung",
            "Beschwerde bei der Aufsichtsbehörde",
        ],
    },
    Language.EN: {
        "email": "hello@aykutspohr.de",
        "subject": "Withdrawal of Consent for Data Processing",
        "body": (
            "I hereby withdraw my consent to the processing of my personal data. "
            "Please delete all my data and confirm the deletion.\n\n"
            "Email address: [Your email address]\n"
            "Date of original inquiry: [If known]\n\n"
            "Best regards"
        ),
        "rights": [
            "Information about processed data",
            "Correction of incorrect data",
            "Deletion of data",
            "Restriction of processing",
            "Data portability",
            "Objection to processing",
            "Complaint to supervisory authority",
        ],
    },
}


def get_privacy_notice_text(language: Language = Language.DE) -> Dict[str, str]:
    return dict(PRIVACY_NOTICES[Language(language)])


def get_consent_withdrawal_instructions(language: Language = Language.DE) -> Dict[str, Any]:
    instructions = WITHDRAWAL_INSTRUCTIONS[Language(language)]
    return {**instructions, "rights": list(instructions["rights"])}
