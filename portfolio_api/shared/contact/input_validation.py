"""
Contact form sanitization and validation.
The server-side rules here are authoritative; the browser only mirrors them.
"""

import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from portfolio_api.shared.contact.schemas import (
    COMPANY_MAX_LENGTH,
    COMPANY_PATTERN,
    EMAIL_MAX_LENGTH,
    EMAIL_PATTERN,
    MAX_INPUT_LENGTH,
    MESSAGE_MAX_LENGTH,
    MESSAGE_MIN_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    NAME_PATTERN,
    PHONE_PATTERN,
    ContactFormValidation,
    is_valid_budget_range,
    is_valid_contact_method,
    is_valid_project_type,
    is_valid_timeline,
)


VALIDATION_MESSAGES = {
    "name_required": "Name ist erforderlich.",
    "name_min_length": f"Name muss mindestens {NAME_MIN_LENGTH} Zeichen lang sein.",
    "name_max_length": f"Name darf maximal {NAME_MAX_LENGTH} Zeichen lang sein.",
    "name_pattern": "Name enthält ungültige Zeichen.",
    "email_required": "E-Mail-Adresse ist erforderlich.",
    "email_too_long": "E-Mail-Adresse ist zu lang.",
    "email_invalid": "Bitte geben Sie eine gültige E-Mail-Adresse ein.",
    "message_required": "Nachricht ist erforderlich.",
    "message_min_length": f"Nachricht muss mindestens {MESSAGE_MIN_LENGTH} Zeichen lang sein.",
    "message_max_length": f"Nachricht darf maximal {MESSAGE_MAX_LENGTH} Zeichen lang sein.",
    "privacy": "Datenschutzerklärung muss akzeptiert werden.",
    "project_type": "Bitte wählen Sie einen gültigen Projekttyp.",
    "phone": "Bitte geben Sie eine gültige Telefonnummer ein.",
    "company_max_length": f"Unternehmensname darf maximal {COMPANY_MAX_LENGTH} Zeichen lang sein.",
    "company_pattern": "Unternehmensname enthält ungültige Zeichen.",
    "budget": "Bitte wählen Sie einen gültigen Budgetbereich.",
    "timeline": "Bitte wählen Sie einen gültigen Zeitrahmen.",
    "contact_method": "Bitte wählen Sie eine gültige Kontaktmethode.",
}

TEXT_FIELDS = ("name", "email", "company", "phone", "message")

_NAME_RE = re.compile(NAME_PATTERN)
_EMAIL_RE = re.compile(EMAIL_PATTERN)
_PHONE_RE = re.compile(PHONE_PATTERN)
_COMPANY_RE = re.compile(COMPANY_PATTERN)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


def sanitize_input(value: Any) -> str:
    """
    Normalize free text before it is validated, scored or emailed.

    Line endings become ``\\n``, control characters other than newline and tab
    are removed, runs of blank lines are collapsed, the text is capped at
    MAX_INPUT_LENGTH characters and finally trimmed. Applying it twice gives
    the same result as applying it once.

    Args:
        value: Raw input; anything that is not a string yields ""

    Returns:
        Sanitized text
    """
    if not isinstance(value, str):
        return ""

    text = value.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS_RE.sub("", text)
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    text = text[:MAX_INPUT_LENGTH]
    return text.strip()


def escape_html(value: Any) -> str:
    """HTML-encode user content before it is interpolated into markup."""
    text = "" if value is None else str(value)
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )


def is_valid_email(email: Any) -> bool:
    sanitized = sanitize_input(email)
    if not sanitized or len(sanitized) > EMAIL_MAX_LENGTH:
        return False
    return _EMAIL_RE.fullmatch(sanitized) is not None


def is_valid_name(name: Any) -> bool:
    sanitized = sanitize_input(name)
    if not NAME_MIN_LENGTH <= len(sanitized) <= NAME_MAX_LENGTH:
        return False
    return _NAME_RE.fullmatch(sanitized) is not None


def is_valid_phone(phone: Any) -> bool:
    """Phone is optional, so an empty value is valid."""
    sanitized = sanitize_input(phone)
    if not sanitized:
        return True
    return _PHONE_RE.fullmatch(sanitized) is not None


def is_valid_company(company: Any) -> bool:
    """Company is optional, so an empty value is valid."""
    sanitized = sanitize_input(company)
    if not sanitized:
        return True
    if len(sanitized) > COMPANY_MAX_LENGTH:
        return False
    return _COMPANY_RE.fullmatch(sanitized) is not None


def _validate_name(value: Any) -> str:
    name = sanitize_input(value)
    if not name:
        return VALIDATION_MESSAGES["name_required"]
    if len(name) < NAME_MIN_LENGTH:
        return VALIDATION_MESSAGES["name_min_length"]
    if len(name) > NAME_MAX_LENGTH:
        return VALIDATION_MESSAGES["name_max_length"]
    if not _NAME_RE.fullmatch(name):
        return VALIDATION_MESSAGES["name_pattern"]
    return ""


def _validate_email(value: Any) -> str:
    email = sanitize_input(value)
    if not email:
        return VALIDATION_MESSAGES["email_required"]
    if len(email) > EMAIL_MAX_LENGTH:
        return VALIDATION_MESSAGES["email_too_long"]
    if not _EMAIL_RE.fullmatch(email):
        return VALIDATION_MESSAGES["email_invalid"]
    return ""


def _validate_message(value: Any) -> str:
    message = sanitize_input(value)
    if not message:
        return VALIDATION_MESSAGES["message_required"]
    if len(message) < MESSAGE_MIN_LENGTH:
        return VALIDATION_MESSAGES["message_min_length"]
    if len(message) > MESSAGE_MAX_LENGTH:
        return VALIDATION_MESSAGES["message_max_length"]
    return ""


def _validate_privacy_consent(value: Any) -> str:
    # Only a JSON boolean true counts as consent
    if value is not True:
        return VALIDATION_MESSAGES["privacy"]
    return ""


def _validate_project_type(value: Any) -> str:
    if not is_valid_project_type(value):
        return VALIDATION_MESSAGES["project_type"]
    return ""


def _validate_phone(value: Any) -> str:
    if not is_valid_phone(value):
        return VALIDATION_MESSAGES["phone"]
    return ""


def _validate_company(value: Any) -> str:
    company = sanitize_input(value)
    if not company:
        return ""
    if len(company) > COMPANY_MAX_LENGTH:
        return VALIDATION_MESSAGES["company_max_length"]
    if not _COMPANY_RE.fullmatch(company):
        return VALIDATION_MESSAGES["company_pattern"]
    return ""


def _optional_choice(check: Callable[[Any], bool], message_key: str) -> Callable[[Any], str]:
    def validate(value: Any) -> str:
        if value is None or value == "":
            return ""
        if not check(value):
            return VALIDATION_MESSAGES[message_key]
        return ""
    return validate


FIELD_VALIDATORS: Dict[str, Callable[[Any], str]] = {
    "name": _validate_name,
    "email": _validate_email,
    "message": _validate_message,
    "privacyConsent": _validate_privacy_consent,
    "projectType": _validate_project_type,
    "company": _validate_company,
    "phone": _validate_phone,
    "budget": _optional_choice(is_valid_budget_range, "budget"),
    "timeline": _optional_choice(is_valid_timeline, "timeline"),
    "preferredContact": _optional_choice(is_valid_contact_method, "contact_method"),
}

REQUIRED_FIELDS = ("name", "email", "message", "privacyConsent", "projectType")
OPTIONAL_FIELDS = ("company", "phone", "budget", "timeline", "preferredContact")


def validate_field(field_name: str, value: Any) -> str:
    """
    Validate a single contact form field.

    Args:
        field_name: JSON field name (e.g. "name", "privacyConsent")
        value: Raw field value

    Returns:
        German error message, or "" if the value is acceptable
    """
    validator = FIELD_VALIDATORS.get(field_name)
    if validator is None:
        return ""
    return validator(value)


def validate_contact_form(data: Dict[str, Any], now: Optional[datetime] = None) -> ContactFormValidation:
    """
    Validate every field of a raw submission.

    Required fields are always checked; optional fields only when they carry
    a value. Validation never raises, it only collects messages.
    """
    errors: Dict[str, str] = {}
    for field_name in REQUIRED_FIELDS:
        error = validate_field(field_name, data.get(field_name))
        if error:
            errors[field_name] = error

    for field_name in OPTIONAL_FIELDS:
        value = data.get(field_name)
        if not value:
            continue
        error = validate_field(field_name, value)
        if error:
            errors[field_name] = error

    return ContactFormValidation(
        errors=errors,
        is_valid=not errors,
        validated_at=now or datetime.now(timezone.utc),
    )


def sanitize_contact_form_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Produce the cleaned field set used to build a ContactFormData.
    Empty optional values become None; consent flags are strict booleans.
    """
    cleaned: Dict[str, Any] = {field: sanitize_input(data.get(field)) for field in TEXT_FIELDS}
    cleaned["company"] = cleaned["company"] or None
    cleaned["phone"] = cleaned["phone"] or None
    cleaned["projectType"] = data.get("projectType")
    cleaned["budget"] = data.get("budget") or None
    cleaned["timeline"] = data.get("timeline") or None
    cleaned["preferredContact"] = data.get("preferredContact") or None
    cleaned["privacyConsent"] = data.get("privacyConsent") is True
    cleaned["marketingConsent"] = data.get("marketingConsent") is True
    return cleaned
