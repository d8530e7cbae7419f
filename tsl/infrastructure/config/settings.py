"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclasses, grouped per concern
- Single source of truth for all configurable values

A .env file in the working directory is loaded first (development convenience).
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

PLACEHOLDER_REVIEW_LINK = "https://search.google.com/local/writereview?placeid=YOUR_PLACE_ID"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _env_secret(name: str) -> str:
    """Credential from env. Template placeholders such as <your-access-token> count as unset."""
    value = os.getenv(name, "").strip()
    return "" if "<" in value else value


@dataclass(frozen=True)
class DatabaseSettings:
    """Durable store connection. Empty URL means in-memory mode."""

    url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "").strip())


@dataclass(frozen=True)
class WhatsAppSettings:
    """WhatsApp Cloud API credentials and template defaults."""

    access_token: str = field(default_factory=lambda: _env_secret("WHATSAPP_TOKEN"))
    phone_number_id: str = field(
        default_factory=lambda: _env_secret("WHATSAPP_PHONE_NUMBER_ID")
    )
    template_name: str = field(
        default_factory=lambda: os.getenv("WHATSAPP_TEMPLATE_NAME", "review_request")
    )
    template_language: str = field(
        default_factory=lambda: os.getenv("WHATSAPP_TEMPLATE_LANGUAGE", "en")
    )

    api_url: str = field(
        default_factory=lambda: os.getenv("WHATSAPP_API_URL", "https://graph.facebook.com")
    )
    api_version: str = field(default_factory=lambda: os.getenv("WHATSAPP_API_VERSION", "v19.0"))
    timeout_seconds: int = field(default_factory=lambda: _env_int("WHATSAPP_TIMEOUT_SECONDS", 15))

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_token and self.phone_number_id)


@dataclass(frozen=True)
class CampaignSettings:
    """Review campaign settings."""

    default_review_link: str = field(
        default_factory=lambda: os.getenv("DEFAULT_REVIEW_LINK", PLACEHOLDER_REVIEW_LINK)
    )

    # Caps outbound calls per campaign invocation
    batch_size: int = field(default_factory=lambda: _env_int("CAMPAIGN_BATCH_SIZE", 200))


@dataclass(frozen=True)
class ServerSettings:
    """HTTP server settings."""

    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("PORT", 4000))
    cors_origins: tuple = field(
        default_factory=lambda: tuple(
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        )
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from tsl.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.whatsapp.template_name)
    """

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    whatsapp: WhatsAppSettings = field(default_factory=WhatsAppSettings)
    campaign: CampaignSettings = field(default_factory=CampaignSettings)
    server: ServerSettings = field(default_factory=ServerSettings)

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.whatsapp.has_credentials:
            issues.append(
                "WARNING: WHATSAPP_TOKEN or WHATSAPP_PHONE_NUMBER_ID not set. "
                "Template messages will be skipped."
            )

        if "YOUR_PLACE_ID" in self.campaign.default_review_link:
            issues.append(
                "WARNING: DEFAULT_REVIEW_LINK contains placeholder. "
                "Businesses without their own link will send a dummy URL."
            )

        if not self.database.url:
            issues.append(
                "WARNING: DATABASE_URL not set. "
                "Running with in-memory data store (non-persistent)."
            )

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
