"""
Store selection. Runs once per process; the chosen backend is never swapped.
"""

import logging

from .base import Store, StoreError
from .database import SqliteStore
from .memory_store import MemoryStore

logger = logging.getLogger(__name__)

SQLITE_PREFIX = "sqlite:///"


def _sqlite_path(database_url: str):
    """Filesystem path for a sqlite URL or bare path, None for other schemes."""
    if database_url.startswith(SQLITE_PREFIX):
        return database_url[len(SQLITE_PREFIX):]
    if "://" in database_url:
        return None
    return database_url


def open_store(database_url: str) -> Store:
    """
    Pick the storage backend for this process.

    - empty or placeholder URL (copied from .env.example): in-memory
    - sqlite:///path or a plain path: SQLite, falling back to in-memory
      if the database cannot be initialized
    """
    database_url = (database_url or "").strip()

    if database_url and "<" in database_url:
        logger.warning("Detected placeholder DATABASE_URL, ignoring and using in-memory store.")
        database_url = ""

    if not database_url:
        logger.warning("DATABASE_URL not set, running with in-memory data store (non-persistent)")
        return MemoryStore()

    path = _sqlite_path(database_url)
    if not path or path == ":memory:":
        logger.warning(f"Unsupported DATABASE_URL '{database_url}', using in-memory store.")
        return MemoryStore()

    store = SqliteStore(path)
    try:
        store.init()
    except StoreError as e:
        logger.error(f"Database connection error: {e}")
        logger.warning("Falling back to in-memory store (server will still run)")
        return MemoryStore()

    logger.info(f"Connected to SQLite database at {path}")
    return store
