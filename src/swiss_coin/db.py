"""SQLite store for Swiss Coin."""

import logging
import sqlite3
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel

from .exceptions import StoreWriteFailedError
from .models import Payer, Person, Split, Transaction
from .store import Store

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

_TABLES: dict[type[BaseModel], str] = {
    Person: "people",
    Transaction: "transactions",
    Payer: "payers",
    Split: "splits",
}


def _to_column(value: Any) -> Any:
    """Convert a Python value into something sqlite3 can bind."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    return value


class Database(Store):
    """SQLite database manager implementing the Store interface."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self._init_schema()

    def _init_schema(self):
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS people (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                phone_number TEXT,
                color_hex TEXT NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS transactions (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                amount TEXT NOT NULL,
                currency TEXT NOT NULL,
                date DATE NOT NULL,
                split_method TEXT NOT NULL,
                note TEXT,
                created_by_id TEXT REFERENCES people(id),
                created_at TIMESTAMP NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS payers (
                id TEXT PRIMARY KEY,
                transaction_id TEXT NOT NULL
                    REFERENCES transactions(id) ON DELETE CASCADE,
                person_id TEXT NOT NULL REFERENCES people(id),
                amount TEXT NOT NULL
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS splits (
                id TEXT PRIMARY KEY,
                transaction_id TEXT NOT NULL
                    REFERENCES transactions(id) ON DELETE CASCADE,
                owed_by_id TEXT NOT NULL REFERENCES people(id),
                amount TEXT NOT NULL,
                raw_amount TEXT,
                UNIQUE (transaction_id, owed_by_id)
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS config (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """
        )

        self.conn.commit()

    def close(self):
        """Close database connection."""
        self.conn.close()

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _table_for(record_type: type[BaseModel]) -> str:
        try:
            return _TABLES[record_type]
        except KeyError:
            raise TypeError(f"No table for record type {record_type.__name__}") from None

    @staticmethod
    def _columns(record: BaseModel) -> dict[str, Any]:
        return {key: _to_column(value) for key, value in record.model_dump().items()}

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute a staged write; any failure rolls back everything staged."""
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error(f"Store write failed, rolled back: {e}")
            raise StoreWriteFailedError(f"Failed to write to the store: {e}") from e

    def _commit(self):
        self.conn.commit()

    # ========================================================================
    # Record operations
    # ========================================================================

    def fetch(self, record_type: type[R], **where: Any) -> list[R]:
        """Return records whose fields equal the given values, in insertion order."""
        table = self._table_for(record_type)
        unknown = set(where) - set(record_type.model_fields)
        if unknown:
            raise ValueError(f"Unknown field(s) for {table}: {', '.join(sorted(unknown))}")

        sql = f"SELECT * FROM {table}"
        if where:
            sql += " WHERE " + " AND ".join(f"{key} = ?" for key in where)
        sql += " ORDER BY rowid"

        cursor = self.conn.execute(sql, tuple(_to_column(v) for v in where.values()))
        return [record_type.model_validate(dict(row)) for row in cursor.fetchall()]

    def get(self, record_type: type[R], record_id: UUID) -> R | None:
        """Get a single record by id."""
        records = self.fetch(record_type, id=record_id)
        return records[0] if records else None

    def create(self, record: BaseModel) -> None:
        """Stage an INSERT for the record."""
        table = self._table_for(type(record))
        columns = self._columns(record)
        placeholders = ", ".join("?" for _ in columns)
        self._execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            tuple(columns.values()),
        )

    def update(self, record: BaseModel) -> None:
        """Stage an UPDATE of every column of the record."""
        table = self._table_for(type(record))
        columns = self._columns(record)
        record_id = columns.pop("id")
        assignments = ", ".join(f"{key} = ?" for key in columns)
        cursor = self._execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            (*columns.values(), record_id),
        )
        if cursor.rowcount == 0:
            self.conn.rollback()
            raise StoreWriteFailedError(f"No {table} record with id {record_id}")

    def delete(self, record: BaseModel) -> None:
        """Stage a DELETE of the record."""
        table = self._table_for(type(record))
        self._execute(f"DELETE FROM {table} WHERE id = ?", (_to_column(record.id),))

    def save(self) -> None:
        """Commit everything staged since the last save."""
        try:
            self._commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.error(f"Save failed, rolled back: {e}")
            raise StoreWriteFailedError(f"Failed to save changes: {e}") from e

    def rollback(self) -> None:
        """Discard everything staged since the last save."""
        self.conn.rollback()

    # ========================================================================
    # Config operations
    # ========================================================================

    def get_config(self, key: str) -> str | None:
        """Get a config value by key."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM config WHERE key = ?", (key,))
        row = cursor.fetchone()
        return str(row["value"]) if row else None

    def set_config(self, key: str, value: str):
        """Stage a config value."""
        self._execute(
            """
            INSERT INTO config (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (key, value, datetime.now().isoformat()),
        )
