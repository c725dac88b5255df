"""Contact routes for project inquiries submitted through the website form."""

import logging
import secrets
import string
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response

from portfolio_api.shared.config.settings import ContactSettings, get_settings
from portfolio_api.shared.contact.email_utils import EmailDispatcher, format_german_datetime
from portfolio_api.shared.contact.input_validation import (
    sanitize_contact_form_data,
    validate_contact_form,
)
from portfolio_api.shared.contact.lead_scoring import calculate_lead_score, determine_priority
from portfolio_api.shared.contact.rate_limit import ContactRateLimiter
from portfolio_api.shared.contact.schemas import (
    ContactFormData,
    ContactFormSubmissionResult,
    ContactInquiry,
    InquirySource,
    InquiryStatus,
)
from portfolio_api.shared.contact.spam_detection import detect_spam, get_message_quality
from portfolio_api.shared.privacy.consent import create_consent_record

CONTACT_PATH = "/api/contact"

router = APIRouter(prefix=CONTACT_PATH, tags=["contact"])

CONFIGURATION_ERROR_MESSAGE = "Serverkonfigurationsfehler. Bitte versuchen Sie es später erneut."
INVALID_REQUEST_MESSAGE = "Ungültige Anfragedaten."
VALIDATION_FAILED_MESSAGE = "Bitte korrigieren Sie die markierten Felder."
UNEXPECTED_ERROR_MESSAGE = "Es ist ein unerwarteter Fehler aufgetreten. Bitte versuchen Sie es später erneut."
SUCCESS_MESSAGE = "Ihre Anfrage wurde erfolgreich übermittelt."
NEXT_STEPS_MESSAGE = "Sie erhalten innerhalb von 24 Stunden eine Antwort per E-Mail."

CORS_PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_ID_ALPHABET = string.ascii_lowercase + string.digits


def get_client_ip(request: Request) -> str:
    """Get client IP address for rate limiting."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and forwarded.split(",")[0].strip():
        # Take the first IP in the chain
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    # Every client without proxy headers shares this bucket
    return "unknown"


def get_rate_limiter(request: Request) -> ContactRateLimiter:
    return request.app.state.contact_rate_limiter


def get_email_dispatcher(settings: ContactSettings = Depends(get_settings)) -> EmailDispatcher:
    return EmailDispatcher(settings)


def generate_inquiry_id(now_ms: int) -> str:
    """INQ-<epoch ms>-<9 random base36 characters>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"INQ-{now_ms}-{suffix}"


def _respond(status_code: int, result: ContactFormSubmissionResult) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=result.to_response_body())


@router.options("")
async def contact_preflight():
    """CORS preflight for the contact endpoint."""
    return Response(status_code=status.HTTP_200_OK, headers=CORS_PREFLIGHT_HEADERS)


@router.post("")
async def submit_contact_form(
    request: Request,
    settings: ContactSettings = Depends(get_settings),
    rate_limiter: ContactRateLimiter = Depends(get_rate_limiter),
    dispatcher: EmailDispatcher = Depends(get_email_dispatcher),
):
    """
    Accept a project inquiry from the website contact form.

    Steps, stopping at the first failure:
    - Email configuration must be complete (500 otherwise)
    - In-memory rate limiting: max 5 submissions per hour per IP (429)
    - Body must be a JSON object (400)
    - Authoritative server-side validation with German messages (400)
    - Lead scoring, priority and advisory spam checks
    - Notification and confirmation emails, best effort
    """
    try:
        return await _process_submission(request, settings, rate_limiter, dispatcher)
    except Exception as e:
        logging.error(f"Contact form API error: {str(e)}", exc_info=True)
        return _respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ContactFormSubmissionResult(success=False, message=UNEXPECTED_ERROR_MESSAGE),
        )


async def _process_submission(
    request: Request,
    settings: ContactSettings,
    rate_limiter: ContactRateLimiter,
    dispatcher: EmailDispatcher,
) -> JSONResponse:
    missing = settings.missing_required()
    if missing:
        logging.error(f"Environment validation failed, missing: {', '.join(missing)}")
        return _respond(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ContactFormSubmissionResult(success=False, message=CONFIGURATION_ERROR_MESSAGE),
        )

    client_ip = get_client_ip(request)
    rate_limit = rate_limiter.check(client_ip)
    if not rate_limit.allowed:
        reset_at = datetime.fromtimestamp(rate_limit.reset_time / 1000, tz=timezone.utc)
        logging.warning(f"Contact form rate limit exceeded for {client_ip}")
        return _respond(
            status.HTTP_429_TOO_MANY_REQUESTS,
            ContactFormSubmissionResult(
                success=False,
                message=f"Zu viele Anfragen. Bitte versuchen Sie es nach {format_german_datetime(reset_at)} erneut.",
            ),
        )

    try:
        payload = await request.json()
    except (ValueError, RecursionError):
        payload = None
    if not isinstance(payload, dict):
        return _respond(
            status.HTTP_400_BAD_REQUEST,
            ContactFormSubmissionResult(success=False, message=INVALID_REQUEST_MESSAGE),
        )

    validation = validate_contact_form(payload)
    if not validation.is_valid:
        return _respond(
            status.HTTP_400_BAD_REQUEST,
            ContactFormSubmissionResult(
                success=False,
                message=VALIDATION_FAILED_MESSAGE,
                errors=validation.errors,
            ),
        )

    form = ContactFormData.model_validate(sanitize_contact_form_data(payload))
    lead_score = calculate_lead_score(form)
    spam = detect_spam(form)
    quality = get_message_quality(form.message)

    tags = [f"project-{form.project_type.value}", InquirySource.WEBSITE_FORM.value]
    if spam.is_spam:
        tags.append("possible-spam")

    now_ms = int(time.time() * 1000)
    inquiry = ContactInquiry(
        **form.model_dump(),
        id=generate_inquiry_id(now_ms),
        submission_date=datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc),
        status=InquiryStatus.NEW,
        source=InquirySource.WEBSITE_FORM,
        ip_address=client_ip,
        user_agent=request.headers.get("user-agent"),
        language="de",
        priority=determine_priority(lead_score, form),
        lead_score=lead_score,
        tags=tags,
    )
    consent = create_consent_record(form, inquiry)

    if spam.is_spam:
        logging.warning(f"Possible spam in inquiry {inquiry.id}: {', '.join(spam.reasons)}")

    delivery = await dispatcher.dispatch(inquiry, quality=quality, spam=spam)

    logging.info(
        "Contact form submission successful: "
        f"id={inquiry.id} project_type={inquiry.project_type.value} "
        f"priority={inquiry.priority.value} lead_score={inquiry.lead_score} "
        f"quality={quality.score} spam_reasons={spam.reasons} consent={consent.id} "
        f"notification_sent={delivery.notification.sent} "
        f"confirmation_sent={delivery.confirmation.sent}"
    )

    return _respond(
        status.HTTP_200_OK,
        ContactFormSubmissionResult(
            success=True,
            inquiry_id=inquiry.id,
            message=SUCCESS_MESSAGE,
            next_steps=NEXT_STEPS_MESSAGE,
        ),
    )
