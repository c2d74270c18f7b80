"""
Storage Backend Module

Record stores for token state: an in-memory backend for tests and
ephemeral tokens, and SQLite for persistence. Records are JSON objects, so
token amounts of any size round-trip as integers.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Union
from datetime import datetime
import sqlite3
import json
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from contextlib import contextmanager


@dataclass
class StorageRecord:
    """Base class for typed records kept in storage"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['created_at'] = self.created_at.isoformat()
        result['updated_at'] = self.updated_at.isoformat()
        return result


class StorageInterface(ABC):
    """Tables of JSON records keyed by id, with atomic blocks"""

    @abstractmethod
    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Insert or replace a record"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load one record, None if absent"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load every record of a table in insertion order"""
        pass

    @abstractmethod
    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record, returning whether it existed"""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Records whose top-level fields equal every filter value"""
        return [
            record for record in self.load_all(table)
            if all(key in record and record[key] == value for key, value in filters.items())
        ]

    def begin_transaction(self) -> None:
        pass

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass

    @contextmanager
    def atomic(self):
        """Commit every write in the block, or none of them"""
        self.begin_transaction()
        try:
            yield
            self.commit()
        except Exception:
            self.rollback()
            raise


class InMemoryStorage(StorageInterface):
    """
    Dict-backed storage. Records are held as JSON text, so callers never
    share mutable state with the store and a transaction snapshot is a
    shallow copy of each table.
    """

    def __init__(self):
        self._tables: Dict[str, Dict[str, str]] = {}
        self._snapshot: Optional[Dict[str, Dict[str, str]]] = None
        self._lock = threading.RLock()

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._tables.setdefault(table, {})[record_id] = json.dumps(data)

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            raw = self._tables.get(table, {}).get(record_id)
        return json.loads(raw) if raw is not None else None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        with self._lock:
            rows = list(self._tables.get(table, {}).values())
        return [json.loads(raw) for raw in rows]

    def delete(self, table: str, record_id: str) -> bool:
        with self._lock:
            return self._tables.get(table, {}).pop(record_id, None) is not None

    def begin_transaction(self) -> None:
        with self._lock:
            if self._snapshot is None:
                self._snapshot = {name: dict(rows) for name, rows in self._tables.items()}

    def commit(self) -> None:
        with self._lock:
            self._snapshot = None

    def rollback(self) -> None:
        with self._lock:
            if self._snapshot is not None:
                self._tables = self._snapshot
                self._snapshot = None

    def close(self) -> None:
        pass


class SQLiteStorage(StorageInterface):
    """
    SQLite storage. All logical tables share one `records` table keyed by
    (tbl, id); upserts keep the original rowid so load_all returns records
    in first-insert order.
    """

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        # DEFERRED: the first write of an atomic block opens the transaction
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False, isolation_level='DEFERRED')
        self._lock = threading.RLock()
        self._in_transaction = False

        with self._lock:
            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
            self._connection.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    tbl TEXT NOT NULL,
                    id TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (tbl, id)
                )
            """)
            self._connection.commit()

    def _autocommit(self) -> None:
        if not self._in_transaction:
            self._connection.commit()

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            self._connection.execute("""
                INSERT INTO records (tbl, id, data) VALUES (?, ?, ?)
                ON CONFLICT (tbl, id) DO UPDATE SET data = excluded.data
            """, (table, record_id, json.dumps(data)))
            self._autocommit()

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._connection.execute(
                "SELECT data FROM records WHERE tbl = ? AND id = ?", (table, record_id)
            ).fetchone()
        return json.loads(row[0]) if row else None

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self._connection.execute(
                "SELECT data FROM records WHERE tbl = ? ORDER BY rowid", (table,)
            ).fetchall()
        return [json.loads(row[0]) for row in rows]

    def delete(self, table: str, record_id: str) -> bool:
        with self._lock:
            cursor = self._connection.execute(
                "DELETE FROM records WHERE tbl = ? AND id = ?", (table, record_id)
            )
            self._autocommit()
            return cursor.rowcount > 0

    def begin_transaction(self) -> None:
        with self._lock:
            self._in_transaction = True

    def commit(self) -> None:
        with self._lock:
            if self._in_transaction:
                self._connection.commit()
                self._in_transaction = False

    def rollback(self) -> None:
        with self._lock:
            if self._in_transaction:
                self._connection.rollback()
                self._in_transaction = False

    def close(self) -> None:
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None
