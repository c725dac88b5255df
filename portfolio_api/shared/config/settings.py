"""Runtime configuration for the contact service, read once from the environment."""

import os
from functools import lru_cache
from typing import List

from pydantic import BaseModel, Field


DEFAULT_MAILGUN_API_BASE_URL = "https://api.mailgun.net/v3"


class ContactSettings(BaseModel):
    """Email provider and contact details used by the contact form pipeline."""
    mailgun_api_key: str = ""
    mailgun_domain: str = ""
    mailgun_api_base_url: str = DEFAULT_MAILGUN_API_BASE_URL
    notification_email: str = "hallo@aykutspohr.de"
    from_email: str = "noreply@aykutspohr.de"
    contact_phone: str = "+49 176 12345678"
    owner_name: str = "Aykut Spohr"
    email_timeout_seconds: float = Field(10.0, gt=0)
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "ContactSettings":
        origins = os.environ.get("CORS_ALLOW_ORIGINS", "*")
        return cls(
            mailgun_api_key=os.environ.get("MAILGUN_API_KEY", ""),
            mailgun_domain=os.environ.get("MAILGUN_DOMAIN", ""),
            mailgun_api_base_url=os.environ.get("MAILGUN_API_BASE_URL") or DEFAULT_MAILGUN_API_BASE_URL,
            notification_email=os.environ.get("NOTIFICATION_EMAIL") or "hallo@aykutspohr.de",
            from_email=os.environ.get("FROM_EMAIL") or "noreply@aykutspohr.de",
            contact_phone=os.environ.get("CONTACT_PHONE") or "+49 176 12345678",
            owner_name=os.environ.get("OWNER_NAME") or "Aykut Spohr",
            email_timeout_seconds=float(os.environ.get("EMAIL_TIMEOUT_SECONDS", "10")),
            cors_allow_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        )

    def missing_required(self) -> List[str]:
        """Names of the required environment variables that are not set."""
        missing = []
        if not self.mailgun_api_key:
            missing.append("MAILGUN_API_KEY")
        if not self.mailgun_domain:
            missing.append("MAILGUN_DOMAIN")
        return missing

    @property
    def is_email_configured(self) -> bool:
        return not self.missing_required()

    @property
    def messages_url(self) -> str:
        return f"{self.mailgun_api_base_url.rstrip('/')}/{self.mailgun_domain}/messages"


@lru_cache()
def get_settings() -> ContactSettings:
    """Process-wide settings; override this dependency in tests."""
    return ContactSettings.from_env()
