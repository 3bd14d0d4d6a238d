"""SQLite-backed translation history persistence."""

import logging
import re
import sqlite3
import threading
import uuid
from datetime import timezone
from pathlib import Path
from typing import Dict, List, Tuple, Union

from translate_me.core import PersistenceError, TranslationRecord
from translate_me.io.history_store import (
    ErrorCallback,
    HistoryStore,
    HistorySubscription,
    RecordsCallback,
    decode_documents,
)

logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SqliteHistoryStore(HistoryStore):
    """Owns a SQLite connection holding the history table.

    Live subscriptions are in-process: subscribers are notified after every
    committed write made through this store. Workers call in from the Qt
    thread pool, so the connection is shared behind a lock.
    """

    def __init__(self, db_path: Union[str, Path], table: str = "translations") -> None:
        if not _TABLE_NAME.match(table):
            raise ValueError(f"Invalid table name: {table!r}")

        self.db_path = db_path
        self.table = table
        self._lock = threading.RLock()
        self._subscribers: Dict[int, Tuple[RecordsCallback, ErrorCallback]] = {}
        self._next_token = 0

        try:
            self.connection = sqlite3.connect(str(db_path), check_same_thread=False)
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to open history database {db_path}: {e}") from e
        self.connection.row_factory = sqlite3.Row
        self.ensure_schema()

    def ensure_schema(self) -> None:
        """Create the history table and its timestamp index if missing."""
        try:
            with self._lock, self.connection:
                self.connection.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {self.table} (
                        id TEXT PRIMARY KEY,
                        original_text TEXT NOT NULL,
                        translated_text TEXT NOT NULL,
                        from_language TEXT NOT NULL,
                        to_language TEXT NOT NULL,
                        timestamp TEXT NOT NULL
                    );
                    """
                )
                self.connection.execute(
                    f"""
                    CREATE INDEX IF NOT EXISTS idx_{self.table}_timestamp
                    ON {self.table}(timestamp);
                    """
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to create history schema: {e}") from e

    def insert(self, record: TranslationRecord) -> None:
        doc_id = uuid.uuid4().hex
        timestamp = record.timestamp.astimezone(timezone.utc).isoformat(timespec="microseconds")
        try:
            with self._lock, self.connection:
                self.connection.execute(
                    f"""
                    INSERT INTO {self.table} (
                        id, original_text, translated_text, from_language, to_language, timestamp
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        doc_id,
                        record.original_text,
                        record.translated_text,
                        record.from_language,
                        record.to_language,
                        timestamp,
                    ),
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to save translation: {e}") from e

        logger.info("Saved translation %s: %r", doc_id, record.original_text)
        self._notify()

    def delete_all(self) -> int:
        try:
            with self._lock, self.connection:
                ids = [row["id"] for row in self.connection.execute(f"SELECT id FROM {self.table}")]
                if ids:
                    self.connection.executemany(
                        f"DELETE FROM {self.table} WHERE id = ?",
                        [(doc_id,) for doc_id in ids],
                    )
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to delete translations: {e}") from e

        logger.info("Deleted %d translations", len(ids))
        if ids:
            self._notify()
        return len(ids)

    def fetch_ordered(self) -> List[TranslationRecord]:
        try:
            with self._lock:
                rows = self.connection.execute(
                    f"""
                    SELECT id, original_text, translated_text, from_language, to_language, timestamp
                    FROM {self.table}
                    ORDER BY timestamp DESC, id DESC
                    """
                ).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to load translations: {e}") from e
        return decode_documents((row["id"], self._row_to_document(row)) for row in rows)

    def subscribe_ordered(
        self, on_update: RecordsCallback, on_error: ErrorCallback
    ) -> HistorySubscription:
        with self._lock:
            records = self.fetch_ordered()
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = (on_update, on_error)
            on_update(records)
        logger.info("Opened history subscription on %s", self.table)
        return HistorySubscription(lambda: self._unsubscribe(token))

    def close(self) -> None:
        with self._lock:
            self._subscribers.clear()
            self.connection.close()

    def _unsubscribe(self, token: int) -> None:
        with self._lock:
            self._subscribers.pop(token, None)
        logger.info("Closed history subscription on %s", self.table)

    def _notify(self) -> None:
        # Read and deliver under the lock so a later write cannot be overtaken
        # by an older snapshot
        with self._lock:
            subscribers = list(self._subscribers.values())
            if not subscribers:
                return
            try:
                records = self.fetch_ordered()
            except PersistenceError as e:
                for _, on_error in subscribers:
                    on_error(e)
                return
            for on_update, _ in subscribers:
                on_update(list(records))

    @staticmethod
    def _row_to_document(row: sqlite3.Row) -> Dict[str, str]:
        return {
            "originalText": row["original_text"],
            "translatedText": row["translated_text"],
            "fromLanguage": row["from_language"],
            "toLanguage": row["to_language"],
            "timestamp": row["timestamp"],
        }
