"""Cloud Firestore history store."""

import logging
from typing import List

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from translate_me.core import PersistenceError, TranslationRecord
from translate_me.io.history_store import (
    ErrorCallback,
    HistoryStore,
    HistorySubscription,
    RecordsCallback,
    decode_documents,
)

logger = logging.getLogger(__name__)


class FirestoreHistoryStore(HistoryStore):
    """
    History store backed by a Firestore collection.

    The snapshot listener runs on a Firestore SDK thread; callers that own
    thread-affine state must marshal the callbacks themselves.
    """

    def __init__(self, client: firestore.Client, collection_name: str = "translations"):
        if client is None:
            raise ValueError("Firestore client must not be None")
        self._client = client
        self._collection_name = collection_name
        self._collection = client.collection(collection_name)

    def _ordered_query(self):
        return self._collection.order_by("timestamp", direction=firestore.Query.DESCENDING)

    def subscribe_ordered(
        self, on_update: RecordsCallback, on_error: ErrorCallback
    ) -> HistorySubscription:
        def on_snapshot(snapshots, changes, read_time):
            try:
                records = decode_documents((snap.id, snap.to_dict()) for snap in snapshots)
            except Exception as e:
                logger.error("Error reading translations snapshot: %s", e)
                on_error(PersistenceError(f"Failed to read translations snapshot: {e}"))
                return
            logger.info("Loaded %d translations from %s", len(records), self._collection_name)
            on_update(records)

        try:
            watch = self._ordered_query().on_snapshot(on_snapshot)
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"Failed to subscribe to translations: {e}") from e

        logger.info("Opened history subscription on %s", self._collection_name)
        return HistorySubscription(watch.unsubscribe)

    def insert(self, record: TranslationRecord) -> None:
        try:
            _, doc_ref = self._collection.add(record.to_document())
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"Failed to save translation: {e}") from e
        logger.info("Saved translation %s: %r", doc_ref.id, record.original_text)

    def delete_all(self) -> int:
        try:
            snapshots = list(self._collection.stream())
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"Failed to read translations for deletion: {e}") from e

        if not snapshots:
            logger.info("No translations to delete")
            return 0

        batch = self._client.batch()
        for snapshot in snapshots:
            batch.delete(snapshot.reference)

        try:
            batch.commit()
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"Failed to delete translations: {e}") from e

        logger.info("Deleted %d translations", len(snapshots))
        return len(snapshots)

    def fetch_ordered(self) -> List[TranslationRecord]:
        try:
            snapshots = list(self._ordered_query().stream())
        except google_exceptions.GoogleAPIError as e:
            raise PersistenceError(f"Failed to load translations: {e}") from e
        return decode_documents((snap.id, snap.to_dict()) for snap in snapshots)
