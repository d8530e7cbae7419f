"""
Campaign Runner - WhatsApp Review Requests from the Command Line
=================================================================

Runs the review-request campaign for one business against the durable store,
the same way POST /api/campaigns/<id>/send-review-requests does.

    python run_campaign.py <business_id>
    python run_campaign.py <business_id> --dry-run
"""

import argparse
import logging
import sys

from tsl.application import BusinessNotFoundError, CampaignRunner, summarize
from tsl.infrastructure.config import get_settings
from tsl.infrastructure.persistence import open_store
from tsl.infrastructure.whatsapp import CloudAPIProvider

logger = logging.getLogger(__name__)


def run_campaign(business_id: str, dry_run: bool = False) -> int:
    """Run the review campaign for a business. Returns a process exit code."""

    print("\n" + "=" * 60)
    print("   TSL Backend - Campaign Runner")
    print("=" * 60 + "\n")

    settings = get_settings()
    for issue in settings.validate():
        logger.warning(issue)

    store = open_store(settings.database.url)
    if store.mode == "memory":
        print("No durable store configured (set DATABASE_URL). Nothing to send.")
        return 1

    provider = CloudAPIProvider.from_settings(settings.whatsapp)
    runner = CampaignRunner(store, provider, settings.campaign, settings.whatsapp)

    try:
        business = runner.get_business(business_id)
    except BusinessNotFoundError as e:
        print(str(e))
        return 1

    if dry_run:
        pending = runner.pending_customers(business.id)
        print(f"{business.name}: {len(pending)} pending customers would be messaged")
        print(f"   Review link: {runner.review_link(business)}\n")
        for customer in pending:
            print(f"   - {customer.name or '(no name)'} ({customer.phone})")
        return 0

    result = runner.run(business.id)

    stats = summarize(store, business.id)
    print("\n" + "=" * 60)
    print("Campaign Complete!")
    print(f"   Requested now: {result.requested} | {result.message}")
    print(f"   Total: {stats['total']} | Requested: {stats['requested']} | "
          f"Reviewed: {stats['reviewed']} | Bad: {stats['bad']}")
    print("=" * 60 + "\n")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Send WhatsApp review requests for a business")
    parser.add_argument("business_id", help="ID of the business whose pending customers to message")
    parser.add_argument("--dry-run", action="store_true", help="List pending customers without sending")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().server.log_level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    return run_campaign(args.business_id, dry_run=args.dry_run)


if __name__ == "__main__":
    sys.exit(main())
