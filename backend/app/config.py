"""
Application configuration.

Settings are read from environment variables (and a .env file, if present)
into an explicit Settings object. The contact handler receives this object
at construction time instead of reading os.environ itself, so tests can
swap in any configuration without touching the process environment.

Environment variables
---------------------
SENDGRID_API_KEY        SendGrid API key. Email dispatch is enabled only
                        when this AND TO_EMAIL are set.
TO_EMAIL                Business inbox that receives lead notifications.
FROM_EMAIL              Sender address (default: noreply@kryshvac.com.au).
ANTHROPIC_API_KEY       Enables AI enrichment of submissions when set.
ANTHROPIC_MODEL         Model used for enrichment (default: claude-haiku-4-5).
BUSINESS_NAME           Display name used in emails (default: Krysh HVAC).
BUSINESS_PHONE          Direct-contact phone line printed in emails.
BUSINESS_WEBSITE        Website link printed in the customer email footer.
BUSINESS_SERVICE_AREA   Service area line printed in the customer email footer.
BUSINESS_TIMEZONE       IANA timezone used to render submission times.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_FROM_EMAIL = "noreply@kryshvac.com.au"
DEFAULT_ANTHROPIC_MODEL = "claude-haiku-4-5"


class BusinessProfile(BaseModel):
    """Business details interpolated into the outbound email templates."""

    name: str = "Krysh HVAC"
    phone: str = "+61 3 XXXX XXXX"
    website: str = "https://kryshvac.com.au"
    service_area: str = "Melbourne's Western Suburbs"
    timezone: str = "Australia/Melbourne"


class Settings(BaseModel):
    """Runtime configuration for the contact form backend."""

    model_config = {"frozen": True}

    sendgrid_api_key: Optional[str] = None
    to_email: Optional[str] = None
    from_email: str = DEFAULT_FROM_EMAIL
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = DEFAULT_ANTHROPIC_MODEL
    business: BusinessProfile = BusinessProfile()

    @property
    def email_configured(self) -> bool:
        """True when both the SendGrid key and the destination inbox are set."""
        return bool(self.sendgrid_api_key and self.to_email)

    @property
    def enrichment_configured(self) -> bool:
        return bool(self.anthropic_api_key)


def _env(name: str) -> Optional[str]:
    """Return a stripped env var, treating blank values as unset."""
    value = os.getenv(name, "").strip()
    return value or None


def load_settings() -> Settings:
    """
    Build Settings from the current environment.

    Unset variables fall back to the model defaults. Missing email
    settings are not an error: the handler degrades to log-only mode.
    """
    defaults = BusinessProfile()
    business = BusinessProfile(
        name=_env("BUSINESS_NAME") or defaults.name,
        phone=_env("BUSINESS_PHONE") or defaults.phone,
        website=_env("BUSINESS_WEBSITE") or defaults.website,
        service_area=_env("BUSINESS_SERVICE_AREA") or defaults.service_area,
        timezone=_env("BUSINESS_TIMEZONE") or defaults.timezone,
    )
    return Settings(
        sendgrid_api_key=_env("SENDGRID_API_KEY"),
        to_email=_env("TO_EMAIL"),
        from_email=_env("FROM_EMAIL") or DEFAULT_FROM_EMAIL,
        anthropic_api_key=_env("ANTHROPIC_API_KEY"),
        anthropic_model=_env("ANTHROPIC_MODEL") or DEFAULT_ANTHROPIC_MODEL,
        business=business,
    )


def get_settings() -> Settings:
    """FastAPI dependency returning the current Settings."""
    return load_settings()
