# Application Layer
# =================
# Use cases on top of the store and messaging provider:
# - campaign: review-request campaign runner and business summary

from .campaign import (
    QUEUED_MESSAGE,
    BusinessNotFoundError,
    CampaignResult,
    CampaignRunner,
    summarize,
)

__all__ = [
    "QUEUED_MESSAGE",
    "BusinessNotFoundError",
    "CampaignResult",
    "CampaignRunner",
    "summarize",
]
