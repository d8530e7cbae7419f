"""
Campaign Runner - Review Requests for One Business
===================================================

One campaign = one pass over a business's pending customers:

    pending --(send attempted)--> requested

Sends are sequential and fire-and-forget. A customer is marked requested
as soon as the send call returns, whether the provider accepted the
message, rejected it, or was skipped for missing credentials.
"""

import logging
from dataclasses import dataclass

from ..domain.models import Business, CustomerStatus, EntityKind
from ..infrastructure.config import CampaignSettings, WhatsAppSettings
from ..infrastructure.persistence import Store
from ..infrastructure.persistence.base import utcnow
from ..infrastructure.whatsapp import MessagingProvider

logger = logging.getLogger(__name__)

QUEUED_MESSAGE = "Review requests queued (best-effort on WhatsApp API)."


class BusinessNotFoundError(Exception):
    """Raised when a campaign targets an unknown business id."""

    def __init__(self, business_id: str):
        super().__init__(f"Business not found: {business_id}")
        self.business_id = business_id


@dataclass
class CampaignResult:
    business_id: str
    requested: int
    message: str = QUEUED_MESSAGE


class CampaignRunner:
    """
    Sends review-request templates to a business's pending customers.

    Usage:
        runner = CampaignRunner(store, provider, settings.campaign, settings.whatsapp)
        result = runner.run(business_id)
        print(result.requested)
    """

    def __init__(
        self,
        store: Store,
        provider: MessagingProvider,
        campaign_settings: CampaignSettings,
        whatsapp_settings: WhatsAppSettings,
    ):
        self._store = store
        self._provider = provider
        self._batch_size = campaign_settings.batch_size
        self._default_link = campaign_settings.default_review_link
        self._template_name = whatsapp_settings.template_name

    def get_business(self, business_id: str) -> Business:
        business = self._store.find_by_id(EntityKind.BUSINESS, business_id)
        if business is None:
            raise BusinessNotFoundError(business_id)
        return business

    def pending_customers(self, business_id: str) -> list:
        """Up to batch_size pending customers of a business, oldest first."""
        return self._store.find(
            EntityKind.CUSTOMER,
            {"business_id": business_id, "status": CustomerStatus.PENDING},
            limit=self._batch_size,
        )

    def review_link(self, business: Business) -> str:
        return business.google_review_link or self._default_link

    def run(self, business_id: str) -> CampaignResult:
        """Run one campaign. Raises BusinessNotFoundError for unknown ids."""
        business = self.get_business(business_id)
        customers = self.pending_customers(business.id)
        link = self.review_link(business)

        logger.info(f"Campaign for {business.name}: {len(customers)} pending customers")

        for customer in customers:
            self._provider.send_template(
                to=customer.phone,
                template_name=self._template_name,
                parameters=[customer.name or "there", business.name, link],
            )

            self._store.update(
                customer,
                status=CustomerStatus.REQUESTED,
                review_request_sent_at=utcnow(),
            )

        logger.info(f"Campaign for {business.name} done: {len(customers)} requested")
        return CampaignResult(business_id=business.id, requested=len(customers))


def summarize(store: Store, business_id: str) -> dict:
    """Customer counts for a business. Recomputed on every call."""
    scope = {"business_id": business_id}
    return {
        "total": store.count(EntityKind.CUSTOMER, scope),
        "requested": store.count(EntityKind.CUSTOMER, {**scope, "status": CustomerStatus.REQUESTED}),
        "reviewed": store.count(EntityKind.CUSTOMER, {**scope, "status": CustomerStatus.REVIEWED}),
        "bad": store.count(EntityKind.CUSTOMER, {**scope, "status": CustomerStatus.BAD_EXPERIENCE}),
    }
