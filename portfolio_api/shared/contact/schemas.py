"""Pydantic schemas, enums and validation constants for the contact API."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectType(str, Enum):
    """Kind of project the inquiry is about."""
    LANDING = "landing"
    STANDARD = "standard"
    CUSTOM = "custom"
    CONSULTATION = "consultation"
    MAINTENANCE = "maintenance"
    REDESIGN = "redesign"
    E_COMMERCE = "e-commerce"
    OTHER = "other"


class BudgetRange(str, Enum):
    UNDER_5000 = "under-5000"
    FROM_5000_TO_10000 = "5000-10000"
    FROM_10000_TO_25000 = "10000-25000"
    FROM_25000_TO_50000 = "25000-50000"
    OVER_50000 = "over-50000"
    TO_DISCUSS = "to-discuss"


class Timeline(str, Enum):
    ASAP = "asap"
    ONE_MONTH = "1-month"
    TWO_TO_THREE_MONTHS = "2-3-months"
    THREE_TO_SIX_MONTHS = "3-6-months"
    FLEXIBLE = "flexible"
    PLANNING_PHASE = "planning-phase"


class ContactMethod(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    WHATSAPP = "whatsapp"
    VIDEO_CALL = "video-call"
    IN_PERSON = "in-person"
    NO_PREFERENCE = "no-preference"


class InquiryStatus(str, Enum):
    """Processing status of an inquiry. Every accepted submission starts as NEW."""
    NEW = "new"
    REVIEWED = "reviewed"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL_SENT = "proposal-sent"
    CONVERTED = "converted"
    DECLINED = "declined"
    CLOSED = "closed"
    SPAM = "spam"


class InquirySource(str, Enum):
    WEBSITE_FORM = "website-form"
    LANDING_PAGE = "landing-page"
    SOCIAL_MEDIA = "social-media"
    REFERRAL = "referral"
    SEARCH_ENGINE = "search-engine"
    DIRECT_EMAIL = "direct-email"
    PHONE_CALL = "phone-call"
    NETWORKING = "networking"
    OTHER = "other"


class InquiryPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# German display labels
PROJECT_TYPES: Dict[ProjectType, str] = {
    ProjectType.LANDING: "Landing Page",
    ProjectType.STANDARD: "Standard Website",
    ProjectType.CUSTOM: "Individuelle Lösung",
    ProjectType.CONSULTATION: "Beratung",
    ProjectType.MAINTENANCE: "Wartung",
    ProjectType.REDESIGN: "Redesign",
    ProjectType.E_COMMERCE: "E-Commerce",
    ProjectType.OTHER: "Andere",
}

BUDGET_RANGES: Dict[BudgetRange, str] = {
    BudgetRange.UNDER_5000: "Unter 5.000 €",
    BudgetRange.FROM_5000_TO_10000: "5.000 € - 10.000 €",
    BudgetRange.FROM_10000_TO_25000: "10.000 € - 25.000 €",
    BudgetRange.FROM_25000_TO_50000: "25.000 € - 50.000 €",
    BudgetRange.OVER_50000: "Über 50.000 €",
    BudgetRange.TO_DISCUSS: "Zu besprechen",
}

TIMELINES: Dict[Timeline, str] = {
    Timeline.ASAP: "So schnell wie möglich",
    Timeline.ONE_MONTH: "1 Monat",
    Timeline.TWO_TO_THREE_MONTHS: "2-3 Monate",
    Timeline.THREE_TO_SIX_MONTHS: "3-6 Monate",
    Timeline.FLEXIBLE: "Flexibel",
    Timeline.PLANNING_PHASE: "Planungsphase",
}

CONTACT_METHODS: Dict[ContactMethod, str] = {
    ContactMethod.EMAIL: "E-Mail",
    ContactMethod.PHONE: "Telefon",
    ContactMethod.WHATSAPP: "WhatsApp",
    ContactMethod.VIDEO_CALL: "Videoanruf",
    ContactMethod.IN_PERSON: "Persönlich",
    ContactMethod.NO_PREFERENCE: "Keine Präferenz",
}

INQUIRY_STATUSES: Dict[InquiryStatus, str] = {
    InquiryStatus.NEW: "Neu",
    InquiryStatus.REVIEWED: "Geprüft",
    InquiryStatus.CONTACTED: "Kontaktiert",
    InquiryStatus.QUALIFIED: "Qualifiziert",
    InquiryStatus.PROPOSAL_SENT: "Angebot gesendet",
    InquiryStatus.CONVERTED: "Kunde gewonnen",
    InquiryStatus.DECLINED: "Abgelehnt",
    InquiryStatus.CLOSED: "Geschlossen",
    InquiryStatus.SPAM: "Spam",
}

INQUIRY_PRIORITIES: Dict[InquiryPriority, str] = {
    InquiryPriority.LOW: "Niedrig",
    InquiryPriority.MEDIUM: "Mittel",
    InquiryPriority.HIGH: "Hoch",
    InquiryPriority.URGENT: "Dringend",
}


# Validation rules shared by every consumer of the contact form
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
NAME_PATTERN = r"^[a-zA-ZäöüßÄÖÜ\s\-\.]+$"
EMAIL_MAX_LENGTH = 254
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
MESSAGE_MIN_LENGTH = 20
MESSAGE_MAX_LENGTH = 1000
PHONE_PATTERN = r"^[\+]?[0-9\s\-\(\)\/]{7,25}$"
COMPANY_MAX_LENGTH = 100
COMPANY_PATTERN = r"^[a-zA-ZäöüßÄÖÜ0-9\s\-\.\,\&\(\)\/]+$"
MAX_INPUT_LENGTH = 5000

QUALIFIED_LEAD_SCORE = 70


def _is_member(enum_cls, value: Any) -> bool:
    return isinstance(value, str) and value in {member.value for member in enum_cls}


def is_valid_project_type(value: Any) -> bool:
    return _is_member(ProjectType, value)


def is_valid_budget_range(value: Any) -> bool:
    return _is_member(BudgetRange, value)


def is_valid_timeline(value: Any) -> bool:
    return _is_member(Timeline, value)


def is_valid_contact_method(value: Any) -> bool:
    return _is_member(ContactMethod, value)


def is_valid_inquiry_status(value: Any) -> bool:
    return _is_member(InquiryStatus, value)


class ContactFormData(BaseModel):
    """Sanitized and validated contact form submission."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    company: Optional[str] = None
    phone: Optional[str] = None
    project_type: ProjectType = Field(..., alias="projectType")
    budget: Optional[BudgetRange] = None
    timeline: Optional[Timeline] = None
    message: str
    privacy_consent: bool = Field(..., alias="privacyConsent")
    marketing_consent: bool = Field(False, alias="marketingConsent")
    preferred_contact: Optional[ContactMethod] = Field(None, alias="preferredContact")


class ContactInquiry(ContactFormData):
    """Accepted submission enriched with server-computed metadata. Never mutated."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    submission_date: datetime = Field(..., alias="submissionDate")
    status: InquiryStatus = InquiryStatus.NEW
    source: InquirySource = InquirySource.WEBSITE_FORM
    ip_address: Optional[str] = Field(None, alias="ipAddress")
    user_agent: Optional[str] = Field(None, alias="userAgent")
    language: str = "de"
    priority: InquiryPriority
    lead_score: int = Field(..., ge=0, le=100, alias="leadScore")
    tags: List[str] = Field(default_factory=list)


def is_high_priority_inquiry(inquiry: ContactInquiry) -> bool:
    return inquiry.priority in (InquiryPriority.HIGH, InquiryPriority.URGENT)


def is_qualified_lead(inquiry: ContactInquiry) -> bool:
    return inquiry.lead_score >= QUALIFIED_LEAD_SCORE


def has_gdpr_consent(inquiry: ContactInquiry) -> bool:
    return inquiry.privacy_consent is True


class ContactFormValidation(BaseModel):
    """Result of validating a raw submission."""
    errors: Dict[str, str] = Field(default_factory=dict)
    is_valid: bool
    validated_at: datetime


class ContactFormSubmissionResult(BaseModel):
    """JSON body returned by POST /api/contact."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: Optional[str] = None
    errors: Optional[Dict[str, str]] = None
    inquiry_id: Optional[str] = Field(None, alias="inquiryId")
    next_steps: Optional[str] = Field(None, alias="nextSteps")

    def to_response_body(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
