"""SQLite-backed FTP upload history for Pedido FTP."""

import datetime as dt
import logging
import sqlite3
import uuid
from contextlib import closing
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger("pedido_ftp.history")


SCHEMA = """
CREATE TABLE IF NOT EXISTS ftp_upload_history (
    id TEXT PRIMARY KEY,
    order_number INTEGER NOT NULL,
    filename TEXT NOT NULL,
    ftp_host TEXT NOT NULL,
    ftp_folder TEXT NOT NULL,
    file_format TEXT NOT NULL,
    order_total REAL NOT NULL,
    items_count INTEGER NOT NULL,
    created_at TEXT NOT NULL
)
"""

# Hard cap for a single history query
MAX_LIMIT = 100


def iso_now() -> str:
    return dt.datetime.now(dt.timezone.utc).replace(microsecond=0).isoformat()


@dataclass
class FTPHistoryEntry:
    """One delivered order file."""
    order_number: int
    filename: str
    ftp_host: str
    ftp_folder: str
    file_format: str
    order_total: float
    items_count: int
    id: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "FTPHistoryEntry":
        return cls(**{key: row[key] for key in row.keys()})


class FTPHistoryStore:
    """Persists FTP upload history entries in SQLite."""

    def __init__(self, db_path: Union[str, Path]):
        """
        Initialize the store.

        Args:
            db_path: SQLite database file, created on first use
        """
        self._db_path = Path(db_path)
        self._initialized = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        if not self._initialized:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._db_path), timeout=30)
        conn.row_factory = sqlite3.Row
        if not self._initialized:
            conn.execute(SCHEMA)
            conn.commit()
            self._initialized = True
        return conn

    def add_entry(self, entry: FTPHistoryEntry) -> FTPHistoryEntry:
        """
        Store a new entry, assigning its id and timestamp.

        Args:
            entry: Entry to store; id and created_at are overwritten

        Returns:
            The stored entry
        """
        entry.id = str(uuid.uuid4())
        entry.created_at = iso_now()

        with closing(self._connect()) as conn:
            conn.execute(
                "INSERT INTO ftp_upload_history (id, order_number, filename, ftp_host,"
                " ftp_folder, file_format, order_total, items_count, created_at)"
                " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    entry.id,
                    entry.order_number,
                    entry.filename,
                    entry.ftp_host,
                    entry.ftp_folder,
                    entry.file_format,
                    entry.order_total,
                    entry.items_count,
                    entry.created_at,
                )
            )
            conn.commit()

        logger.info(f"Recorded FTP upload of {entry.filename} (order {entry.order_number})")
        return entry

    def recent(self, limit: int = 10) -> List[FTPHistoryEntry]:
        """
        Most recent entries, newest first.

        Args:
            limit: Maximum number of entries (capped at MAX_LIMIT)
        """
        limit = max(1, min(int(limit), MAX_LIMIT))

        with closing(self._connect()) as conn:
            rows = conn.execute(
                "SELECT * FROM ftp_upload_history"
                " ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (limit,)
            ).fetchall()

        return [FTPHistoryEntry.from_row(row) for row in rows]
