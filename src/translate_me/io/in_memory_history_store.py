"""In-memory history store for testing and session-only history."""

import logging
import threading
import uuid
from typing import Any, Dict, List, Mapping, Tuple

from translate_me.core import TranslationRecord
from translate_me.io.history_store import (
    ErrorCallback,
    HistoryStore,
    HistorySubscription,
    RecordsCallback,
    decode_documents,
)

logger = logging.getLogger(__name__)


class InMemoryHistoryStore(HistoryStore):
    """
    Dictionary-backed store. No persistence.

    Documents are kept raw, like a document database would, and decoded on
    every read. Subscribers are notified synchronously after each write.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._subscribers: Dict[int, Tuple[RecordsCallback, ErrorCallback]] = {}
        self._next_token = 0

    def add_document(self, data: Mapping[str, Any]) -> str:
        """Store a raw document and return its generated id."""
        doc_id = uuid.uuid4().hex
        with self._lock:
            self._documents[doc_id] = dict(data)
        self._notify()
        return doc_id

    def insert(self, record: TranslationRecord) -> None:
        doc_id = self.add_document(record.to_document())
        logger.info("Saved translation %s: %r", doc_id, record.original_text)

    def delete_all(self) -> int:
        with self._lock:
            count = len(self._documents)
            self._documents.clear()
        if count:
            self._notify()
        return count

    def fetch_ordered(self) -> List[TranslationRecord]:
        with self._lock:
            snapshot = list(self._documents.items())
        return decode_documents(snapshot)

    def subscribe_ordered(
        self, on_update: RecordsCallback, on_error: ErrorCallback
    ) -> HistorySubscription:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = (on_update, on_error)
            on_update(self.fetch_ordered())
        return HistorySubscription(lambda: self._unsubscribe(token))

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _unsubscribe(self, token: int) -> None:
        with self._lock:
            self._subscribers.pop(token, None)

    def _notify(self) -> None:
        # Held across read and delivery so snapshots arrive in write order
        with self._lock:
            records = self.fetch_ordered()
            for on_update, _ in list(self._subscribers.values()):
                on_update(list(records))
