# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - persistence/: SQLite store with in-memory fallback
# - whatsapp/: WhatsApp Cloud API template sender
# - importer/: CSV/Excel customer list parser
# - config/: Environment and settings management
