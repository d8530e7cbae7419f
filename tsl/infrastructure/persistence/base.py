"""
Store Interface - Shared Contract for All Storage Backends
===========================================================

Handlers and the campaign runner only ever talk to a Store. Which backend
sits behind it (SQLite or in-memory) is decided once at startup.

Records handed out by a store are snapshots: changing one does nothing
until it is passed to update().
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional

from ...domain.models import (
    BOOL_FIELDS,
    DATE_FIELDS,
    DATETIME_FIELDS,
    RECORD_TYPES,
    REQUIRED_FIELDS,
    STATUS_VALUES,
    EntityKind,
    field_names,
    kind_of,
)

# Set by the store, never taken from callers
MANAGED_FIELDS = frozenset({"id", "created_at", "updated_at"})


class StoreError(Exception):
    """Base exception for storage failures."""
    pass


class RecordValidationError(StoreError):
    """Raised when a record violates its schema (missing field, bad status)."""
    pass


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: str) -> datetime:
    # fromisoformat() only accepts a trailing "Z" from Python 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def coerce_value(name: str, value: Any) -> Any:
    """Convert a raw field value (from callers or from a DB row) to its domain type."""
    if value is None:
        return None

    if isinstance(value, Enum):
        value = value.value

    try:
        if name in DATETIME_FIELDS:
            if isinstance(value, datetime):
                return value
            if isinstance(value, date):
                return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
            return _parse_datetime(str(value))

        if name in DATE_FIELDS:
            if isinstance(value, datetime):
                return value.date()
            if isinstance(value, date):
                return value
            return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise RecordValidationError(f"Invalid value for '{name}': {value!r}") from e

    if name in BOOL_FIELDS:
        return bool(value)

    if name == "status" and value not in STATUS_VALUES:
        raise RecordValidationError(
            f"Invalid status {value!r}. Expected one of: {', '.join(sorted(STATUS_VALUES))}"
        )

    return value


def encode_value(value: Any) -> Any:
    """Convert a domain value to something both backends compare and store the same way."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    return value


def build_record(kind: EntityKind, fields: Mapping[str, Any], record_id: str, now: datetime):
    """
    Validate caller-supplied fields and build a new record of the given kind.

    Unknown and store-managed fields are dropped. Required fields must be
    present and non-empty.
    """
    allowed = set(field_names(kind)) - MANAGED_FIELDS
    values = {
        name: coerce_value(name, value)
        for name, value in fields.items()
        if name in allowed and value is not None
    }

    missing = sorted(
        name for name in REQUIRED_FIELDS[kind]
        if values.get(name) in (None, "")
    )
    if missing:
        raise RecordValidationError(
            f"{kind.value}: missing required field(s): {', '.join(missing)}"
        )

    return RECORD_TYPES[kind](id=record_id, created_at=now, updated_at=now, **values)


def apply_update(record, fields: Mapping[str, Any], now: datetime):
    """Return a copy of record with fields overwritten and updated_at bumped."""
    kind = kind_of(record)
    allowed = set(field_names(kind)) - MANAGED_FIELDS
    unknown = sorted(set(fields) - allowed)
    if unknown:
        raise RecordValidationError(f"Cannot update field(s): {', '.join(unknown)}")

    changes = {name: coerce_value(name, value) for name, value in fields.items()}
    updated = replace(record, updated_at=now, **changes)

    missing = sorted(
        name for name in REQUIRED_FIELDS[kind]
        if getattr(updated, name) in (None, "")
    )
    if missing:
        raise RecordValidationError(f"Cannot clear required field(s): {', '.join(missing)}")
    return updated


def check_filters(kind: EntityKind, filters: Optional[Mapping[str, Any]]) -> None:
    """Reject filters on fields the record type does not have."""
    unknown = sorted(set(filters or ()) - set(field_names(kind)))
    if unknown:
        raise StoreError(f"Unknown filter field(s) for {kind.value}: {', '.join(unknown)}")


def matches(record, filters: Optional[Mapping[str, Any]]) -> bool:
    """Exact-match predicate over record attributes."""
    if not filters:
        return True
    return all(
        encode_value(getattr(record, name, None)) == encode_value(value)
        for name, value in filters.items()
    )


class Store(ABC):
    """
    Storage contract used by handlers and the campaign runner.

    Usage:
        store = open_store(settings.database.url)
        business = store.create(EntityKind.BUSINESS, {"name": "Maya Dental"})
        pending = store.find(EntityKind.CUSTOMER,
                             {"business_id": business.id, "status": "pending"},
                             limit=200)
    """

    mode: str = ""

    @abstractmethod
    def create(self, kind: EntityKind, fields: Mapping[str, Any]):
        """Validate and persist one record. Returns the stored record."""
        ...

    @abstractmethod
    def create_many(self, kind: EntityKind, fields_list: Iterable[Mapping[str, Any]]) -> list:
        """Validate every entry first, then persist them all."""
        ...

    @abstractmethod
    def find(
        self,
        kind: EntityKind,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List:
        """Records matching all filters, in insertion order."""
        ...

    @abstractmethod
    def find_by_id(self, kind: EntityKind, record_id: str):
        """Record with the given id, or None."""
        ...

    @abstractmethod
    def count(self, kind: EntityKind, filters: Optional[Mapping[str, Any]] = None) -> int:
        ...

    @abstractmethod
    def update(self, record, **fields):
        """Persist field changes for an existing record and return the fresh copy."""
        ...
