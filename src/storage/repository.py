"""SQLite persistence for scanned receipts.

Receipt fields map to columns; the item list is stored as a JSON blob
and rehydrated on load.
"""

import sqlite3
import time
from dataclasses import fields, replace
from pathlib import Path

from src.errors import StorageError, StorageErrorCode
from src.models.receipt import Receipt, items_from_json, items_to_json
from src.utils.logger import get_logger

logger = get_logger(__name__)

_DDL = """
CREATE TABLE IF NOT EXISTS receipts (
    id INTEGER PRIMARY KEY,
    store_name TEXT NOT NULL DEFAULT '',
    cnpj TEXT NOT NULL DEFAULT '',
    address TEXT NOT NULL DEFAULT '',
    date_time TEXT NOT NULL DEFAULT '',
    items_json TEXT NOT NULL DEFAULT '[]',
    subtotal REAL NOT NULL DEFAULT 0.0,
    discount REAL NOT NULL DEFAULT 0.0,
    total_amount REAL NOT NULL DEFAULT 0.0,
    total_taxes REAL NOT NULL DEFAULT 0.0,
    federal_taxes REAL NOT NULL DEFAULT 0.0,
    state_taxes REAL NOT NULL DEFAULT 0.0,
    payment_method TEXT NOT NULL DEFAULT '',
    card_number TEXT NOT NULL DEFAULT '',
    access_key TEXT NOT NULL DEFAULT '',
    nfce_number TEXT NOT NULL DEFAULT '',
    raw_text TEXT NOT NULL DEFAULT '',
    created_at INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_receipts_created_at ON receipts(created_at);
"""

_COLUMNS: tuple[str, ...] = tuple(
    "items_json" if f.name == "items" else f.name for f in fields(Receipt)
)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_row(receipt: Receipt) -> tuple:
    row = []
    for column in _COLUMNS:
        if column == "items_json":
            row.append(items_to_json(receipt.items))
        else:
            row.append(getattr(receipt, column))
    return tuple(row)


def _from_row(row: sqlite3.Row) -> Receipt:
    values = {key: row[key] for key in row.keys() if key != "items_json"}
    values["items"] = tuple(items_from_json(row["items_json"]))
    return Receipt(**values)


class ReceiptRepository:
    """CRUD access to the receipts table.

    Args:
        db_path: Path to the SQLite database file; ``":memory:"`` keeps
            everything in memory.
    """

    def __init__(self, db_path: str | Path = "receipts.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = self._connect()
        return self._conn

    def _connect(self) -> sqlite3.Connection:
        if str(self._db_path) == ":memory:":
            target = ":memory:"
        else:
            path = Path(self._db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            target = str(path)
        conn = sqlite3.connect(target, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.executescript(_DDL)
        return conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def save(self, receipt: Receipt) -> Receipt:
        """Insert or replace a receipt.

        Receipts without an ``id`` or ``created_at`` get the current time
        in epoch milliseconds. A generated ``id`` that is already taken is
        moved to the next free millisecond, so two receipts saved in the
        same millisecond never replace each other. An explicit ``id``
        replaces the stored receipt with that id.

        Returns:
            The receipt as stored, with identity fields filled in.

        Raises:
            StorageError: ``SAVE_FAILED`` on database errors.
        """
        now = _now_ms()
        placeholders = ", ".join("?" for _ in _COLUMNS)
        stored = replace(receipt, created_at=receipt.created_at or now)
        try:
            conn = self._get_conn()
            if not receipt.id:
                stored = replace(stored, id=self._free_id(conn, now))
            conn.execute(
                f"INSERT OR REPLACE INTO receipts ({', '.join(_COLUMNS)}) "
                f"VALUES ({placeholders})",
                _to_row(stored),
            )
            conn.commit()
        except sqlite3.Error as exc:
            logger.error("Saving receipt %d failed: %s", stored.id, exc)
            raise StorageError(StorageErrorCode.SAVE_FAILED, str(exc)) from exc

        logger.info("Saved receipt %d (%d items)", stored.id, len(stored.items))
        return stored

    @staticmethod
    def _free_id(conn: sqlite3.Connection, candidate: int) -> int:
        while conn.execute(
            "SELECT 1 FROM receipts WHERE id = ?", (candidate,)
        ).fetchone():
            candidate += 1
        return candidate

    def get(self, receipt_id: int) -> Receipt:
        """Load one receipt.

        Raises:
            StorageError: ``NOT_FOUND`` if no receipt has this id,
                ``LOAD_FAILED`` on database errors.
        """
        try:
            row = (
                self._get_conn()
                .execute("SELECT * FROM receipts WHERE id = ?", (receipt_id,))
                .fetchone()
            )
        except sqlite3.Error as exc:
            raise StorageError(StorageErrorCode.LOAD_FAILED, str(exc)) from exc

        if row is None:
            raise StorageError(StorageErrorCode.NOT_FOUND, f"id={receipt_id}")
        return _from_row(row)

    def list_all(self) -> list[Receipt]:
        """Return every stored receipt, newest first."""
        try:
            rows = (
                self._get_conn()
                .execute("SELECT * FROM receipts ORDER BY created_at DESC")
                .fetchall()
            )
        except sqlite3.Error as exc:
            raise StorageError(StorageErrorCode.LOAD_FAILED, str(exc)) from exc
        return [_from_row(row) for row in rows]

    def delete(self, receipt_id: int) -> None:
        """Delete a receipt; deleting an unknown id is a no-op.

        Raises:
            StorageError: ``DELETE_FAILED`` on database errors.
        """
        try:
            conn = self._get_conn()
            conn.execute("DELETE FROM receipts WHERE id = ?", (receipt_id,))
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(StorageErrorCode.DELETE_FAILED, str(exc)) from exc
        logger.info("Deleted receipt %d", receipt_id)
