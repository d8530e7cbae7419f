from .base import RecordValidationError, Store, StoreError
from .database import SqliteStore
from .factory import open_store
from .memory_store import MemoryStore

__all__ = [
    "MemoryStore",
    "RecordValidationError",
    "SqliteStore",
    "Store",
    "StoreError",
    "open_store",
]
