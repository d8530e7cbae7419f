"""
SQLite Database Repository - Durable Record Persistence
========================================================

One table per entity kind, columns generated from the domain records.
Dates are stored as ISO-8601 text, booleans as integers.
"""

import sqlite3
import logging
from contextlib import contextmanager
from typing import Any, Iterable, List, Mapping, Optional

from ...domain.models import (
    BOOL_FIELDS,
    RECORD_TYPES,
    REQUIRED_FIELDS,
    STATUS_VALUES,
    EntityKind,
    field_names,
    kind_of,
)
from .base import (
    Store,
    StoreError,
    apply_update,
    build_record,
    check_filters,
    coerce_value,
    encode_value,
    new_id,
    utcnow,
)

logger = logging.getLogger(__name__)

DATABASE_FILE = "tsl.db"


def _column_sql(kind: EntityKind, name: str) -> str:
    if name == "id":
        return "id TEXT PRIMARY KEY"
    if name in BOOL_FIELDS:
        return f"{name} INTEGER NOT NULL DEFAULT 0"
    if name == "status":
        allowed = ", ".join(f"'{s}'" for s in sorted(STATUS_VALUES))
        return f"status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ({allowed}))"
    if name in REQUIRED_FIELDS[kind]:
        return f"{name} TEXT NOT NULL"
    return f"{name} TEXT"


class SqliteStore(Store):
    """
    SQLite-backed store.

    Usage:
        store = SqliteStore("tsl.db")
        store.init()

        business = store.create(EntityKind.BUSINESS, {"name": "Maya Dental"})
        store.count(EntityKind.CUSTOMER, {"business_id": business.id})
    """

    mode = "sqlite"

    def __init__(self, db_path: str = DATABASE_FILE):
        self.db_path = db_path

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def init(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            for kind in EntityKind:
                columns = ",\n    ".join(_column_sql(kind, name) for name in field_names(kind))
                conn.execute(f"CREATE TABLE IF NOT EXISTS {kind.value} (\n    {columns}\n)")

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_customers_business_status "
                "ON customers (business_id, status)"
            )

        logger.info(f"Database initialized: {self.db_path}")

    # ── Writes ─────────────────────────────────────────────────────

    def create(self, kind: EntityKind, fields: Mapping[str, Any]):
        return self.create_many(kind, [fields])[0]

    def create_many(self, kind: EntityKind, fields_list: Iterable[Mapping[str, Any]]) -> list:
        now = utcnow()
        records = [build_record(kind, fields, new_id(), now) for fields in fields_list]
        if not records:
            return []

        names = field_names(kind)
        sql = (
            f"INSERT INTO {kind.value} ({', '.join(names)}) "
            f"VALUES ({', '.join('?' for _ in names)})"
        )
        with self._get_connection() as conn:
            conn.executemany(sql, [self._to_row(r, names) for r in records])

        logger.debug(f"Inserted {len(records)} {kind.value}")
        return records

    def update(self, record, **fields):
        kind = kind_of(record)
        current = self.find_by_id(kind, record.id)
        if current is None:
            raise StoreError(f"Record {record.id} not found")

        updated = apply_update(current, fields, utcnow())
        changed = list(fields) + ["updated_at"]
        set_clause = ", ".join(f"{name} = ?" for name in changed)
        values = [encode_value(getattr(updated, name)) for name in changed] + [record.id]

        with self._get_connection() as conn:
            conn.execute(f"UPDATE {kind.value} SET {set_clause} WHERE id = ?", values)
        return updated

    # ── Reads ──────────────────────────────────────────────────────

    def find(
        self,
        kind: EntityKind,
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List:
        where, params = self._where(kind, filters)
        sql = f"SELECT * FROM {kind.value} {where} ORDER BY rowid"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self._get_connection() as conn:
            rows = conn.execute(sql, params).fetchall()
            return [self._row_to_record(kind, row) for row in rows]

    def find_by_id(self, kind: EntityKind, record_id: str):
        with self._get_connection() as conn:
            row = conn.execute(
                f"SELECT * FROM {kind.value} WHERE id = ?", (str(record_id),)
            ).fetchone()
            return self._row_to_record(kind, row) if row else None

    def count(self, kind: EntityKind, filters: Optional[Mapping[str, Any]] = None) -> int:
        where, params = self._where(kind, filters)
        with self._get_connection() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {kind.value} {where}", params).fetchone()[0]

    # ── Row mapping ────────────────────────────────────────────────

    def _where(self, kind: EntityKind, filters: Optional[Mapping[str, Any]]):
        if not filters:
            return "", []

        check_filters(kind, filters)
        clauses = []
        params = []
        for name, value in filters.items():
            if value is None:
                clauses.append(f"{name} IS NULL")
            else:
                clauses.append(f"{name} = ?")
                params.append(encode_value(value))
        return "WHERE " + " AND ".join(clauses), params

    def _to_row(self, record, names: List[str]) -> tuple:
        return tuple(encode_value(getattr(record, name)) for name in names)

    def _row_to_record(self, kind: EntityKind, row: sqlite3.Row):
        """Convert database row to a domain record."""
        values = {name: coerce_value(name, row[name]) for name in row.keys()}
        return RECORD_TYPES[kind](**values)
