from .settings import (
    PLACEHOLDER_REVIEW_LINK,
    CampaignSettings,
    DatabaseSettings,
    ServerSettings,
    Settings,
    WhatsAppSettings,
    get_settings,
)

__all__ = [
    "PLACEHOLDER_REVIEW_LINK",
    "CampaignSettings",
    "DatabaseSettings",
    "ServerSettings",
    "Settings",
    "WhatsAppSettings",
    "get_settings",
]
