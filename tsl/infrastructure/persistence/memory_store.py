"""
In-Memory Store - Non-Persistent Fallback
==========================================

Used when no durable store is configured or reachable. Each entity kind is
an ordered list scanned linearly on every query.

LIMITATIONS:
- Data is lost when the process exits
- No locking: safe only because handlers run one at a time on the event loop
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ...domain.models import EntityKind, kind_of
from .base import (
    Store,
    StoreError,
    apply_update,
    build_record,
    check_filters,
    matches,
    new_id,
    utcnow,
)

logger = logging.getLogger(__name__)


class MemoryStore(Store):
    """List-backed store with the same read/write semantics as SqliteStore."""

    mode = "memory"

    def __init__(self):
        self._records: Dict[EntityKind, list] = {kind: [] for kind in EntityKind}

    def create(self, kind: EntityKind, fields: Mapping[str, Any]):
        return self.create_many(kind, [fields])[0]

    def create_many(self, kind: EntityKind, fields_list: Iterable[Mapping[str, Any]]) -> list:
        now = utcnow()
        records = [build_record(kind, fields, new_id(), now) for fields in fields_list]
        self._records[kind].extend(records)
        logger.debug(f"Stored {len(records)} {kind.value} in memory")
        return [replace(r) for r in records]

    def find(
        self,
        kind: EntityKind,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List:
        check_filters(kind, filters)
        found = []
        for record in self._records[kind]:
            if limit is not None and len(found) >= limit:
                break
            if matches(record, filters):
                found.append(replace(record))
        return found

    def find_by_id(self, kind: EntityKind, record_id: str):
        for record in self._records[kind]:
            if record.id == str(record_id):
                return replace(record)
        return None

    def count(self, kind: EntityKind, filters: Optional[Mapping[str, Any]] = None) -> int:
        check_filters(kind, filters)
        return sum(1 for record in self._records[kind] if matches(record, filters))

    def update(self, record, **fields):
        records = self._records[kind_of(record)]
        for index, stored in enumerate(records):
            if stored.id == record.id:
                updated = apply_update(stored, fields, utcnow())
                records[index] = updated
                return replace(updated)
        raise StoreError(f"Record {record.id} not found")
