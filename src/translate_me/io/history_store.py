"""History store abstraction and the live-subscription handle."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from translate_me.core import MalformedRecordError, PersistenceError, TranslationRecord

logger = logging.getLogger(__name__)

RecordsCallback = Callable[[List[TranslationRecord]], None]
ErrorCallback = Callable[[PersistenceError], None]


class HistorySubscription:
    """Handle for a live subscription opened by a HistoryStore.

    Closing is idempotent. The handle can be used as a context manager so the
    subscription is released when the owning scope ends.
    """

    def __init__(self, on_close: Callable[[], None]):
        self._on_close = on_close
        self._closed = False
        self._lock = threading.Lock()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._on_close()

    def __enter__(self) -> "HistorySubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class HistoryStore(ABC):
    """
    Abstract store for the translation history collection.

    Implementations (in-memory, SQLite, Firestore) persist TranslationRecord
    documents and push the ordered collection to live subscribers.
    """

    @abstractmethod
    def subscribe_ordered(
        self, on_update: RecordsCallback, on_error: ErrorCallback
    ) -> HistorySubscription:
        """
        Open a live subscription to all records, newest first.

        Args:
            on_update: Called with the full ordered list on the initial load
                and after every change to the collection.
            on_error: Called when a whole snapshot cannot be delivered.
                Individual malformed documents are skipped instead.

        Returns:
            HistorySubscription that must be closed by the owner.

        Raises:
            PersistenceError: If the subscription cannot be opened.
        """
        pass

    @abstractmethod
    def insert(self, record: TranslationRecord) -> None:
        """
        Write a new record. The store assigns its id.

        Raises:
            PersistenceError: If the write fails.
        """
        pass

    @abstractmethod
    def delete_all(self) -> int:
        """
        Delete every record in one atomic batch.

        Returns:
            Number of records deleted.

        Raises:
            PersistenceError: If reading the references or committing fails.
        """
        pass

    @abstractmethod
    def fetch_ordered(self) -> List[TranslationRecord]:
        """One-shot read of all records, newest first."""
        pass


def decode_documents(
    documents: Iterable[Tuple[Optional[str], Optional[Mapping[str, Any]]]],
) -> List[TranslationRecord]:
    """Decode raw (id, data) pairs, skipping malformed ones, newest first."""
    records: List[TranslationRecord] = []
    for doc_id, data in documents:
        try:
            records.append(TranslationRecord.from_document(doc_id, data))
        except MalformedRecordError as e:
            logger.warning("Skipping stored translation: %s", e)
    records.sort(key=lambda record: record.timestamp, reverse=True)
    return records
