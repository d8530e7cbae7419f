"""
TSL Backend - Web Server Entry Point
====================================

Run this to start the JSON API:
    python main.py

Listens on PORT (default 4000). Health check: GET /api/health

To run a review campaign from the command line:
    python run_campaign.py <business_id>
"""

import uvicorn

from tsl.infrastructure.config import get_settings


def main():
    """Start the web server."""
    settings = get_settings()

    print("\n" + "=" * 50)
    print("   TSL Backend - Review Request API")
    print("=" * 50)
    print(f"\n   Listening on http://{settings.server.host}:{settings.server.port}")
    print("   Press Ctrl+C to stop\n")

    uvicorn.run(
        "tsl.web.app:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level.lower(),
    )


if __name__ == "__main__":
    main()
