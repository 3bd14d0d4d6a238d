"""Build configured services and stores from SettingsManager values."""

import logging
from typing import Optional

from google.cloud import firestore

from translate_me.core import LoadingFlag
from translate_me.io import FirestoreHistoryStore, HistoryStore, InMemoryHistoryStore, SqliteHistoryStore
from translate_me.services.settings_manager import SettingsManager
from translate_me.services.translation import MyMemoryTranslationService

logger = logging.getLogger(__name__)


def create_history_store(settings: SettingsManager) -> HistoryStore:
    """Instantiate the history store backend named in settings."""
    backend = settings.get_history_backend()
    collection = settings.get_collection_name()
    logger.info("Using %s history store (%s)", backend, collection)

    if backend == "memory":
        return InMemoryHistoryStore()
    if backend == "sqlite":
        return SqliteHistoryStore(settings.get_sqlite_path(), table=collection)
    client = firestore.Client(project=settings.get_firestore_project_id())
    return FirestoreHistoryStore(client, collection_name=collection)


def create_translation_service(
    settings: SettingsManager, loading_flag: Optional[LoadingFlag] = None
) -> MyMemoryTranslationService:
    return MyMemoryTranslationService(
        loading_flag=loading_flag,
        email=settings.get_mymemory_email(),
        timeout=settings.get_http_timeout(),
    )
