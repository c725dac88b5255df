"""Privacy routes serving the consent texts shown next to the contact form."""

from fastapi import APIRouter, Query

from portfolio_api.shared.privacy.consent import (
    DATA_RETENTION_PERIODS,
    PRIVACY_POLICY_VERSION,
    Language,
    get_consent_withdrawal_instructions,
    get_privacy_notice_text,
)

router = APIRouter(prefix="/api/privacy", tags=["privacy"])


@router.get("/notice")
async def get_privacy_notice(language: Language = Query(Language.DE)):
    """Consent checkbox texts, withdrawal instructions and retention periods."""
    return {
        "language": language.value,
        "version": PRIVACY_POLICY_VERSION,
        "notice": get_privacy_notice_text(language),
        "withdrawal": get_consent_withdrawal_instructions(language),
        "retention_periods": DATA_RETENTION_PERIODS,
    }
