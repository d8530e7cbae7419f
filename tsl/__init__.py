# TSL Backend - WhatsApp Review Request Campaigns
# ================================================
# Small JSON backend for pilot leads, businesses, customer imports and
# review-request campaigns sent through WhatsApp template messages.
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI routes (tsl.web) and the campaign CLI
# - Application:    Campaign runner and business summary
# - Domain:         Records and status enum (no external dependencies)
# - Infrastructure: Store backends, WhatsApp Cloud API, spreadsheet import

__version__ = "0.1.0"
