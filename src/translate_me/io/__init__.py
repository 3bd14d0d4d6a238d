"""I/O layer - translation history persistence."""

from .history_store import HistoryStore, HistorySubscription, decode_documents
from .in_memory_history_store import InMemoryHistoryStore
from .sqlite_history_store import SqliteHistoryStore
from .firestore_history_store import FirestoreHistoryStore

__all__ = [
    "HistoryStore",
    "HistorySubscription",
    "decode_documents",
    "InMemoryHistoryStore",
    "SqliteHistoryStore",
    "FirestoreHistoryStore",
]
