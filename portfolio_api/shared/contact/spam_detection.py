"""Advisory spam detection and message quality scoring for contact inquiries."""

import re
from typing import List

from pydantic import BaseModel, Field

from portfolio_api.shared.contact.schemas import ContactFormData


LINK_LIMIT = 2

SPAM_PATTERNS = [
    re.compile(r"seo\s+services?", re.IGNORECASE),
    re.compile(r"increase\s+your\s+ranking", re.IGNORECASE),
    re.compile(r"guaranteed\s+traffic", re.IGNORECASE),
    re.compile(r"buy\s+now", re.IGNORECASE),
    re.compile(r"click\s+here", re.IGNORECASE),
    re.compile(r"free\s+money", re.IGNORECASE),
    re.compile(r"earn\s+\$\d+", re.IGNORECASE),
]

DISPOSABLE_EMAIL_PATTERNS = [
    re.compile(r"@yopmail\.", re.IGNORECASE),
    re.compile(r"@tempmail\.", re.IGNORECASE),
    re.compile(r"@guerrillamail\.", re.IGNORECASE),
    re.compile(r"@10minutemail\.", re.IGNORECASE),
]

GREETING_ONLY_RE = re.compile(r"^(hi|hello|hey|test)\.?$", re.IGNORECASE)
LINK_RE = re.compile(r"https?://")

BUSINESS_KEYWORDS = (
    "website", "business", "company", "service", "project",
    "budget", "timeline", "requirements", "goal", "objective",
)
POLITE_WORDS = ("please", "thank", "bitte", "danke", "freundlich")


class SpamCheckResult(BaseModel):
    is_spam: bool
    reasons: List[str] = Field(default_factory=list)


class MessageQuality(BaseModel):
    score: int = Field(..., ge=0, le=100)
    factors: List[str] = Field(default_factory=list)


def detect_spam(form: ContactFormData) -> SpamCheckResult:
    """
    Flag submissions that look like spam.

    The result is advisory: callers tag and log it, nothing is rejected.
    """
    reasons: List[str] = []

    if len(LINK_RE.findall(form.message)) > LINK_LIMIT:
        reasons.append("Too many links in message")

    for pattern in SPAM_PATTERNS:
        if pattern.search(form.message):
            reasons.append("Spam pattern detected")

    for pattern in DISPOSABLE_EMAIL_PATTERNS:
        if pattern.search(form.email):
            reasons.append("Suspicious email domain")

    if len(form.message) < 20 and GREETING_ONLY_RE.match(form.message.strip()):
        reasons.append("Low quality message")

    return SpamCheckResult(is_spam=bool(reasons), reasons=reasons)


def get_message_quality(message: str) -> MessageQuality:
    """Additive 0-100 score for how detailed and business-focused a message is."""
    score = 0
    factors: List[str] = []
    lowered = message.lower()
    words = message.split()

    if len(message) >= 100:
        score += 20
        factors.append("Good message length")
    elif len(message) >= 50:
        score += 10
        factors.append("Adequate message length")

    if len(words) >= 20:
        score += 15
        factors.append("Detailed message")
    elif len(words) >= 10:
        score += 10
        factors.append("Reasonable detail level")

    keyword_matches = [keyword for keyword in BUSINESS_KEYWORDS if keyword in lowered]
    if len(keyword_matches) >= 3:
        score += 20
        factors.append("Business-focused content")
    elif keyword_matches:
        score += 10
        factors.append("Some business relevance")

    sentences = [s for s in re.split(r"[.!?]+", message) if s.strip()]
    if len(sentences) >= 3:
        score += 10
        factors.append("Well-structured message")

    if any(word in lowered for word in POLITE_WORDS):
        score += 5
        factors.append("Polite tone")

    return MessageQuality(score=max(0, min(100, score)), factors=factors)
