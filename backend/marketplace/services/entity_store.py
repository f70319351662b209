import sqlite3
from pathlib import Path
from threading import Lock
from typing import List, Optional, Type

from pydantic import BaseModel

from marketplace.models import Booking, Client, ServiceProvider

_VALID_TABLE_CHARS = set("abcdefghijklmnopqrstuvwxyz_")


class RecordTable:
    """Key-value table mapping string identifiers to one kind of record.

    Records are stored as JSON documents and decoded into fresh model
    instances on every read, so callers never hold a reference to stored
    state. Iteration order is by identifier.
    """

    def __init__(self, db_path: str, table: str, model: Type[BaseModel], read_only: bool = False) -> None:
        if not table or set(table) - _VALID_TABLE_CHARS:
            raise ValueError(f"Invalid table name: {table!r}")
        self.db_path = Path(db_path)
        self.table = table
        self.model = model
        self.read_only = read_only
        self._lock = Lock()
        # A read-only table never creates the file, its directory or the schema.
        if not read_only:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_db()

    def _connect(self) -> sqlite3.Connection:
        if self.read_only:
            conn = sqlite3.connect(f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True, check_same_thread=False)
        else:
            conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._lock:
            with self._connect() as conn:
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {self.table} (
                        id TEXT PRIMARY KEY,
                        record_json TEXT NOT NULL
                    )
                    """
                )
                conn.commit()

    def get(self, record_id: str) -> Optional[BaseModel]:
        with self._lock:
            with self._connect() as conn:
                row = conn.execute(
                    f"SELECT record_json FROM {self.table} WHERE id = ?",
                    (record_id,),
                ).fetchone()
        if not row:
            return None
        return self.model.model_validate_json(row["record_json"])

    def insert(self, record_id: str, record: BaseModel) -> None:
        payload = record.model_dump_json()
        with self._lock:
            with self._connect() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {self.table} (id, record_json)
                    VALUES (?, ?)
                    ON CONFLICT(id) DO UPDATE SET record_json = excluded.record_json
                    """,
                    (record_id, payload),
                )
                conn.commit()

    def values(self) -> List[BaseModel]:
        with self._lock:
            with self._connect() as conn:
                rows = conn.execute(f"SELECT record_json FROM {self.table} ORDER BY id").fetchall()
        return [self.model.model_validate_json(row["record_json"]) for row in rows]

    def count(self) -> int:
        with self._lock:
            with self._connect() as conn:
                row = conn.execute(f"SELECT COUNT(*) AS total FROM {self.table}").fetchone()
        return int(row["total"])


class EntityStore:
    """The three record tables backing the marketplace, in one database file."""

    def __init__(self, db_path: str, read_only: bool = False) -> None:
        self.db_path = db_path
        self.providers = RecordTable(db_path, "service_providers", ServiceProvider, read_only=read_only)
        self.bookings = RecordTable(db_path, "bookings", Booking, read_only=read_only)
        self.clients = RecordTable(db_path, "clients", Client, read_only=read_only)

    def ping(self) -> bool:
        self.providers.count()
        return True
