"""Email utilities for contact inquiries (operator notification and user confirmation)."""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

import httpx
from pydantic import BaseModel

from portfolio_api.shared.config.settings import ContactSettings
from portfolio_api.shared.contact.input_validation import escape_html
from portfolio_api.shared.contact.schemas import (
    BUDGET_RANGES,
    CONTACT_METHODS,
    INQUIRY_PRIORITIES,
    PROJECT_TYPES,
    TIMELINES,
    ContactInquiry,
    InquiryPriority,
)
from portfolio_api.shared.contact.spam_detection import MessageQuality, SpamCheckResult


CONFIRMATION_SUBJECT = "Bestätigung Ihrer Anfrage - Antwort folgt in Kürze"

NEXT_STEPS = [
    "Ich prüfe Ihre Anfrage und projektspezifischen Anforderungen",
    "Sie erhalten eine erste Einschätzung und Terminvorschläge innerhalb von 24 Stunden",
    "Wir besprechen Details in einem kostenlosen 30-minütigen Erstgespräch",
    "Sie erhalten ein unverbindliches Angebot mit transparenter Kostenaufstellung",
]

PRIORITY_COLORS = {
    InquiryPriority.URGENT: "#dc2626",
    InquiryPriority.HIGH: "#ea580c",
    InquiryPriority.MEDIUM: "#d97706",
    InquiryPriority.LOW: "#65a30d",
}


class OutboundEmail(BaseModel):
    from_address: str
    to: str
    subject: str
    html: str
    text: str


class EmailSendResult(BaseModel):
    sent: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class DispatchResult(BaseModel):
    notification: EmailSendResult
    confirmation: EmailSendResult


def format_german_datetime(value: datetime) -> str:
    """Render a timestamp the way de-DE locales do, in server local time."""
    return value.astimezone().strftime("%d.%m.%Y, %H:%M:%S")


def _single_line(value: str) -> str:
    # Header values must not contain line breaks
    return " ".join(value.split())


def _consent_label(given: bool) -> str:
    return "Erteilt" if given else "Nicht erteilt"


def _optional_details(inquiry: ContactInquiry) -> List[tuple]:
    """(label, value) pairs for the optional fields the submitter filled in."""
    details = []
    if inquiry.company:
        details.append(("Unternehmen", inquiry.company))
    if inquiry.phone:
        details.append(("Telefon", inquiry.phone))
    details.append(("Projekttyp", PROJECT_TYPES[inquiry.project_type]))
    if inquiry.budget:
        details.append(("Budget", BUDGET_RANGES[inquiry.budget]))
    if inquiry.timeline:
        details.append(("Zeitrahmen", TIMELINES[inquiry.timeline]))
    if inquiry.preferred_contact:
        details.append(("Bevorzugter Kontakt", CONTACT_METHODS[inquiry.preferred_contact]))
    return details


def build_notification_email(
    inquiry: ContactInquiry,
    settings: ContactSettings,
    quality: Optional[MessageQuality] = None,
    spam: Optional[SpamCheckResult] = None,
) -> OutboundEmail:
    """
    Build the internal notification for the site operator.

    Args:
        inquiry: Accepted inquiry with score and priority filled in
        settings: Sender and recipient addresses
        quality: Optional message quality result to include
        spam: Optional spam check result to include

    Returns:
        OutboundEmail with HTML and plain-text bodies
    """
    project_label = PROJECT_TYPES[inquiry.project_type]
    priority = inquiry.priority.value.upper()
    priority_label = INQUIRY_PRIORITIES[inquiry.priority]
    priority_color = PRIORITY_COLORS[inquiry.priority]
    submitted = format_german_datetime(inquiry.submission_date)
    details = _optional_details(inquiry)

    detail_rows = "".join(
        f"""
        <p style="margin: 0 0 12px 0;"><strong style="color: #555;">{escape_html(label)}:</strong><br>{escape_html(value)}</p>"""
        for label, value in details
    )
    message_html = escape_html(inquiry.message).replace("\n", "<br>")

    review_html = ""
    review_text = ""
    if quality is not None:
        review_html += f'<p style="margin: 0 0 6px 0;">Nachrichtenqualität: {quality.score}/100</p>'
        review_text += f"Nachrichtenqualität: {quality.score}/100\n"
    if spam is not None and spam.is_spam:
        reasons = ", ".join(spam.reasons)
        review_html += f'<p style="margin: 0; color: #dc2626;">Spam-Verdacht: {escape_html(reasons)}</p>'
        review_text += f"Spam-Verdacht: {reasons}\n"

    html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Neue Kontaktanfrage</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #dc2626; color: white; padding: 20px; border-radius: 8px 8px 0 0;">
        <h2 style="margin: 0;">Neue Kontaktanfrage</h2>
        <p style="margin: 8px 0 0 0;">Priorität: <span style="background: white; color: {priority_color}; font-weight: bold; padding: 2px 6px; border-radius: 4px;">{priority}</span> ({priority_label})</p>
    </div>

    <div style="background: #f9f9f9; padding: 20px; border-radius: 0 0 8px 8px;">
        <p style="margin: 0 0 12px 0;"><strong style="color: #555;">Name:</strong><br>{escape_html(inquiry.name)}</p>
        <p style="margin: 0 0 12px 0;"><strong style="color: #555;">E-Mail:</strong><br><a href="mailto:{escape_html(inquiry.email)}">{escape_html(inquiry.email)}</a></p>
        {detail_rows}
        <p style="margin: 0 0 12px 0;"><strong style="color: #555;">Nachricht:</strong><br>{message_html}</p>

        <div style="background: #e5e7eb; padding: 10px; border-radius: 4px; margin: 10px 0;">
            <strong>Lead Score: {inquiry.lead_score}/100</strong>
            {review_html}
        </div>

        <p style="margin: 0 0 12px 0;"><strong style="color: #555;">DSGVO-Einverständnis:</strong><br>{_consent_label(inquiry.privacy_consent)}</p>
        <p style="margin: 0 0 12px 0;"><strong style="color: #555;">Marketing-Einverständnis:</strong><br>{_consent_label(inquiry.marketing_consent)}</p>
        <p style="margin: 0 0 12px 0;"><strong style="color: #555;">Eingereicht:</strong><br>{submitted}</p>
        <p style="margin: 0;"><strong style="color: #555;">Anfrage-ID:</strong><br>{escape_html(inquiry.id)}</p>
    </div>
</body>
</html>
"""

    detail_lines = "".join(f"{label}: {value}\n" for label, value in details)
    text_body = f"""
Neue Kontaktanfrage

Priorität: {priority} ({priority_label})

Name: {inquiry.name}
E-Mail: {inquiry.email}
{detail_lines}
Nachricht:
{inquiry.message}

Lead Score: {inquiry.lead_score}/100
{review_text}
DSGVO-Einverständnis: {_consent_label(inquiry.privacy_consent)}
Marketing-Einverständnis: {_consent_label(inquiry.marketing_consent)}

Eingereicht: {submitted}
Anfrage-ID: {inquiry.id}
"""

    return OutboundEmail(
        from_address=f"Portfolio Website <{settings.from_email}>",
        to=settings.notification_email,
        subject=_single_line(f"Neue Anfrage: {project_label} von {inquiry.name}"),
        html=html_body,
        text=text_body,
    )


def build_confirmation_email(inquiry: ContactInquiry, settings: ContactSettings) -> OutboundEmail:
    """Build the confirmation sent back to the person who submitted the form."""
    project_label = PROJECT_TYPES[inquiry.project_type]
    steps_html = "".join(f"\n                <li>{step}</li>" for step in NEXT_STEPS)
    steps_text = "\n".join(f"{number}. {step}" for number, step in enumerate(NEXT_STEPS, start=1))
    owner = escape_html(settings.owner_name)
    contact_email = escape_html(settings.notification_email)
    phone = escape_html(settings.contact_phone)
    phone_link = escape_html("".join(settings.contact_phone.split()))

    html_body = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Bestätigung Ihrer Anfrage</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: #dc2626; color: white; padding: 20px; border-radius: 8px 8px 0 0; text-align: center;">
        <h2 style="margin: 0;">Vielen Dank für Ihre Anfrage!</h2>
        <p style="margin: 8px 0 0 0;">Ihre Nachricht ist bei mir angekommen</p>
    </div>

    <div style="background: #f9f9f9; padding: 20px; border-radius: 0 0 8px 8px;">
        <p>Hallo {escape_html(inquiry.name)},</p>

        <p>vielen Dank für Ihr Interesse an meinen Dienstleistungen. Ihre Anfrage zum Thema <strong>{escape_html(project_label)}</strong> habe ich erhalten und werde sie zeitnah bearbeiten.</p>

        <div style="background: #e0f2fe; padding: 15px; border-radius: 4px; margin: 20px 0;">
            <h3 style="margin-top: 0;">Wie es weitergeht:</h3>
            <ol>{steps_html}
            </ol>
        </div>

        <p>Sollten Sie noch Fragen haben oder zusätzliche Informationen benötigen, können Sie mich gerne direkt kontaktieren:</p>

        <div style="background: #f3f4f6; padding: 15px; border-radius: 4px; margin: 20px 0;">
            <p style="margin: 0 0 6px 0;"><strong>Direkter Kontakt:</strong></p>
            <p style="margin: 0 0 6px 0;">E-Mail: <a href="mailto:{contact_email}">{contact_email}</a></p>
            <p style="margin: 0 0 6px 0;">Telefon: <a href="tel:{phone_link}">{phone}</a></p>
            <p style="margin: 0;">Antwortzeit: Innerhalb von 24 Stunden</p>
        </div>

        <p>Mit freundlichen Grüßen<br>
        {owner}<br>
        Web Development &amp; Digital Solutions</p>

        <hr style="margin: 30px 0; border: none; border-top: 1px solid #e5e7eb;">

        <p style="font-size: 12px; color: #666;">
            Ihre Anfrage-ID: {escape_html(inquiry.id)}<br>
            Diese E-Mail wurde automatisch generiert. Bitte antworten Sie nicht direkt auf diese E-Mail.
        </p>
    </div>
</body>
</html>
"""

    text_body = f"""
Vielen Dank für Ihre Anfrage!

Hallo {inquiry.name},

vielen Dank für Ihr Interesse an meinen Dienstleistungen. Ihre Anfrage zum Thema {project_label} habe ich erhalten und werde sie zeitnah bearbeiten.

Wie es weitergeht:
{steps_text}

Direkter Kontakt:
E-Mail: {settings.notification_email}
Telefon: {settings.contact_phone}
Antwortzeit: Innerhalb von 24 Stunden

Mit freundlichen Grüßen
{settings.owner_name}
Web Development & Digital Solutions

---
Ihre Anfrage-ID: {inquiry.id}
Diese E-Mail wurde automatisch generiert.
"""

    return OutboundEmail(
        from_address=f"{settings.owner_name} <{settings.from_email}>",
        to=inquiry.email,
        subject=CONFIRMATION_SUBJECT,
        html=html_body,
        text=text_body,
    )


class MailgunClient:
    """Sends messages through the Mailgun HTTP API. Failures are reported, never raised."""

    def __init__(self, settings: ContactSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    async def send(self, message: OutboundEmail) -> EmailSendResult:
        if not self.settings.is_email_configured:
            logging.error("Mailgun configuration missing")
            return EmailSendResult(sent=False, error="Mailgun configuration missing")

        fields = {
            "from": message.from_address,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        # (None, bytes) parts are sent as plain multipart form fields
        multipart = {name: (None, value.encode("utf-8")) for name, value in fields.items()}

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.email_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.settings.messages_url,
                    auth=("api", self.settings.mailgun_api_key),
                    files=multipart,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logging.error(f"Email sending error ({message.subject}): {str(e)}")
            return EmailSendResult(sent=False, error=str(e))

        if response.is_error:
            logging.error(f"Mailgun API error: {response.status_code} {response.text[:500]}")
            return EmailSendResult(
                sent=False,
                status_code=response.status_code,
                error=f"Mailgun responded with {response.status_code}",
            )

        return EmailSendResult(sent=True, status_code=response.status_code)


class EmailDispatcher:
    """Sends the notification and confirmation emails for an inquiry."""

    def __init__(self, settings: ContactSettings, client: Optional[MailgunClient] = None):
        self.settings = settings
        self.client = client or MailgunClient(settings)

    async def dispatch(
        self,
        inquiry: ContactInquiry,
        quality: Optional[MessageQuality] = None,
        spam: Optional[SpamCheckResult] = None,
    ) -> DispatchResult:
        # The two emails do not depend on each other
        notification, confirmation = await asyncio.gather(
            self.client.send(build_notification_email(inquiry, self.settings, quality, spam)),
            self.client.send(build_confirmation_email(inquiry, self.settings)),
        )

        if not notification.sent:
            logging.error(f"Failed to send notification email for inquiry: {inquiry.id}")
        if not confirmation.sent:
            logging.error(f"Failed to send confirmation email for inquiry: {inquiry.id}")

        return DispatchResult(notification=notification, confirmation=confirmation)
