"""Translation History Coordinator - Manages translate-then-save workflow and history state."""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Set

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from translate_me.core import (
    ENGLISH_TO_SPANISH,
    LanguagePair,
    LoadingFlag,
    PersistenceError,
    TranslationRecord,
)
from translate_me.io import HistoryStore, HistorySubscription
from translate_me.services import StoreWorker, TranslationService, TranslationWorker

logger = logging.getLogger(__name__)


class RequestState(Enum):
    """Lifecycle of the latest translate-and-save request."""

    IDLE = "idle"
    LOADING = "loading"
    PERSISTING = "persisting"


class _WorkerRequest(QObject):
    """Base for helpers that receive worker signals on the coordinator's thread."""

    def __init__(self, owner: "TranslationHistoryCoordinator"):
        super().__init__()
        self.owner = owner

    @Slot()
    def release(self):
        """Drop the owner's reference once the worker has finished."""
        self.owner._pending_requests.discard(self)


class _TranslationRequest(_WorkerRequest):
    """Holds the submitted text and its generation while the API call runs."""

    def __init__(self, text: str, generation: int, owner: "TranslationHistoryCoordinator"):
        super().__init__(owner)
        self.text = text
        self.generation = generation

    @Slot(object)
    def on_translation_result(self, result):
        self.owner._handle_translation_result(result, self.text, self.generation)

    @Slot(str)
    def on_translation_error(self, error: str):
        self.owner._handle_translation_error(error, self.generation)


class _StoreRequest(_WorkerRequest):
    """Routes a store worker's outcome to the given callbacks."""

    def __init__(
        self,
        on_done: Callable[[Any], None],
        on_error: Callable[[str], None],
        owner: "TranslationHistoryCoordinator",
    ):
        super().__init__(owner)
        self._on_done = on_done
        self._on_error = on_error

    @Slot(object)
    def on_store_result(self, value):
        self._on_done(value)

    @Slot(str)
    def on_store_error(self, error: str):
        self._on_error(error)


class TranslationHistoryCoordinator(QObject):
    """
    Orchestrates translation requests and the persisted history.

    Responsibilities:
    - Mirror the store's ordered records through a live subscription.
    - Run translations off the UI thread and save successful ones.
    - Expose loading and request state to the presentation layer via signals.
    - Clear the history on request (confirmation is the caller's concern).

    All state is mutated on the thread that owns the coordinator; worker and
    store callbacks are delivered there through queued signals.
    """

    records_changed = Signal(object)  # List[TranslationRecord]
    loading_changed = Signal(bool)
    state_changed = Signal(object)
    translation_completed = Signal(str)
    translation_failed = Signal(str)
    history_cleared = Signal(int)
    store_error = Signal(str)

    # Store callbacks may fire on foreign threads; these marshal them here
    _snapshot_received = Signal(object)
    _snapshot_failed = Signal(object)

    def __init__(
        self,
        translation_service: TranslationService,
        history_store: HistoryStore,
        loading_flag: LoadingFlag,
        language_pair: LanguagePair = ENGLISH_TO_SPANISH,
        thread_pool: Optional[QThreadPool] = None,
    ):
        super().__init__()

        if translation_service is None:
            raise ValueError("TranslationService must not be None")
        if history_store is None:
            raise ValueError("HistoryStore must not be None")
        if loading_flag is None:
            raise ValueError("LoadingFlag must not be None")

        self.translation_service = translation_service
        self.history_store = history_store
        self.loading_flag = loading_flag
        self.language_pair = language_pair
        self.thread_pool = thread_pool if thread_pool is not None else QThreadPool.globalInstance()

        self._records: List[TranslationRecord] = []
        self._state = RequestState.IDLE
        self._last_translation = ""
        self._subscription: Optional[HistorySubscription] = None
        self._listening = False

        # Every submit gets a new generation; results from older ones are stale
        self._generation = 0

        # Keep helpers alive while their workers run in background threads
        self._pending_requests: Set[_WorkerRequest] = set()

        self.loading_flag.changed.connect(self.loading_changed)
        self._snapshot_received.connect(self._apply_snapshot)
        self._snapshot_failed.connect(self._report_snapshot_error)

    @property
    def records(self) -> List[TranslationRecord]:
        return list(self._records)

    @property
    def is_loading(self) -> bool:
        return self.loading_flag.is_active

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def last_translation(self) -> str:
        """Latest translated text, or the error text of the latest failure."""
        return self._last_translation

    @property
    def is_subscribed(self) -> bool:
        return self._listening

    def on_start(self) -> None:
        """Open the live history subscription. Failures are reported, not raised."""
        if self._listening:
            return

        logger.info("Fetching translations from history store")
        self._listening = True
        try:
            self._subscription = self.history_store.subscribe_ordered(
                self._snapshot_received.emit,
                self._snapshot_failed.emit,
            )
        except PersistenceError as e:
            self._listening = False
            logger.error("Error subscribing to translations: %s", e)
            self.store_error.emit(str(e))

    def on_stop(self) -> None:
        """Close the live history subscription."""
        self._listening = False
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
            logger.info("History subscription closed")

    def submit(self, text: str) -> None:
        """Translate text and save the result. Empty text is ignored."""
        if not text:
            return

        self._generation += 1
        generation = self._generation
        self._set_state(RequestState.LOADING)

        worker = TranslationWorker(
            translation_service=self.translation_service,
            text=text,
            language_pair=self.language_pair,
        )
        request = _TranslationRequest(text, generation, self)
        self._pending_requests.add(request)

        worker.signals.translation_result.connect(request.on_translation_result)
        worker.signals.error.connect(request.on_translation_error)
        worker.signals.finished.connect(request.release)

        self.thread_pool.start(worker)

    def clear_history(self) -> None:
        """Delete every stored record."""
        logger.info("Attempting to delete all translations")
        self._run_store_operation(
            self.history_store.delete_all,
            description="delete",
            on_done=self._handle_history_cleared,
            on_error=self._handle_clear_error,
        )

    def _handle_translation_result(self, result, text: str, generation: int) -> None:
        """Handle a translation result (runs in the coordinator's thread)."""
        is_current = generation == self._generation

        if result.is_error:
            if not is_current:
                logger.debug("Ignoring stale translation error (request %d, current %d)", generation, self._generation)
                return
            self._fail(result.error_message or "Unknown error")
            return

        record = TranslationRecord.create(
            original_text=text,
            translated_text=result.text,
            language_pair=self.language_pair,
        )

        if is_current:
            self._last_translation = result.text
            self.translation_completed.emit(result.text)
            self._set_state(RequestState.PERSISTING)
        else:
            logger.debug("Saving stale translation without display (request %d, current %d)", generation, self._generation)

        logger.info("Saving new translation: %r -> %r", record.original_text, record.translated_text)
        self._run_store_operation(
            lambda: self.history_store.insert(record),
            description="save",
            on_done=lambda _: self._handle_insert_finished(generation),
            on_error=lambda error: self._handle_insert_error(error, generation),
        )

    def _handle_translation_error(self, error: str, generation: int) -> None:
        if generation != self._generation:
            logger.debug("Ignoring stale translation error (request %d, current %d)", generation, self._generation)
            return
        self._fail(error)

    def _fail(self, message: str) -> None:
        self._last_translation = f"Error: {message}"
        self.translation_failed.emit(self._last_translation)
        self._set_state(RequestState.IDLE)

    def _handle_insert_finished(self, generation: int) -> None:
        if generation == self._generation:
            self._set_state(RequestState.IDLE)

    def _handle_insert_error(self, error: str, generation: int) -> None:
        logger.error("Error saving translation: %s", error)
        self.store_error.emit(error)
        if generation == self._generation:
            self._set_state(RequestState.IDLE)

    def _handle_history_cleared(self, count) -> None:
        logger.info("Deleted %d translations", count)
        self.history_cleared.emit(count)

    def _handle_clear_error(self, error: str) -> None:
        logger.error("Error deleting translations: %s", error)
        self.store_error.emit(error)

    @Slot(object)
    def _apply_snapshot(self, records) -> None:
        if not self._listening:
            return
        self._records = list(records)
        logger.info("Successfully loaded %d translations", len(self._records))
        self.records_changed.emit(self.records)

    @Slot(object)
    def _report_snapshot_error(self, error) -> None:
        # Keep the last good list on screen
        logger.error("Error fetching translations: %s", error)
        self.store_error.emit(str(error))

    def _run_store_operation(
        self,
        operation: Callable[[], Any],
        description: str,
        on_done: Callable[[Any], None],
        on_error: Callable[[str], None],
    ) -> None:
        worker = StoreWorker(operation, description)
        request = _StoreRequest(on_done, on_error, self)
        self._pending_requests.add(request)

        worker.signals.store_result.connect(request.on_store_result)
        worker.signals.error.connect(request.on_store_error)
        worker.signals.finished.connect(request.release)

        self.thread_pool.start(worker)

    def _set_state(self, state: RequestState) -> None:
        if state is self._state:
            return
        self._state = state
        self.state_changed.emit(state)
