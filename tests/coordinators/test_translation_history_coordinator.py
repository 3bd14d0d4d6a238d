"""Unit tests for TranslationHistoryCoordinator."""

import threading
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from PySide6.QtCore import QCoreApplication, QThreadPool

from translate_me.coordinators import RequestState, TranslationHistoryCoordinator
from translate_me.core import (
    ENGLISH_TO_SPANISH,
    DecodingError,
    LoadingFlag,
    PersistenceError,
    TranslationRecord,
)
from translate_me.io import HistorySubscription, InMemoryHistoryStore
from translate_me.services import TranslationResult

T1 = datetime(2025, 3, 23, 12, 0, 0, tzinfo=timezone.utc)

_app = None


def ensure_qt_app():
    global _app
    _app = QCoreApplication.instance() or QCoreApplication([])


def drain(coordinator, rounds: int = 5) -> None:
    """Wait for workers and deliver their queued signals."""
    for _ in range(rounds):
        coordinator.thread_pool.waitForDone(5000)
        QCoreApplication.processEvents()


def wait_until(predicate, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not met before timeout")
        QCoreApplication.processEvents()
        time.sleep(0.01)


def make_record(original: str, translated: str, timestamp: datetime) -> TranslationRecord:
    return TranslationRecord.create(original, translated, ENGLISH_TO_SPANISH, timestamp=timestamp)


@pytest.fixture(autouse=True)
def qt_app():
    ensure_qt_app()


@pytest.fixture
def store():
    """Provide an in-memory store wrapped for call inspection."""
    return MagicMock(wraps=InMemoryHistoryStore())


@pytest.fixture
def translation_service():
    """Provide a mocked TranslationService that answers 'hola'."""
    service = MagicMock()
    service.translate.return_value = TranslationResult(text="hola", provider="mymemory")
    return service


@pytest.fixture
def coordinator(translation_service, store):
    """Create a coordinator with its own thread pool."""
    coordinator = TranslationHistoryCoordinator(
        translation_service=translation_service,
        history_store=store,
        loading_flag=LoadingFlag(),
        thread_pool=QThreadPool(),
    )
    yield coordinator
    coordinator.on_stop()
    drain(coordinator)


class TestInitialization:

    def test_fails_fast_on_none_service(self, store):
        with pytest.raises(ValueError, match="TranslationService must not be None"):
            TranslationHistoryCoordinator(None, store, LoadingFlag())

    def test_fails_fast_on_none_store(self, translation_service):
        with pytest.raises(ValueError, match="HistoryStore must not be None"):
            TranslationHistoryCoordinator(translation_service, None, LoadingFlag())

    def test_fails_fast_on_none_loading_flag(self, translation_service, store):
        with pytest.raises(ValueError, match="LoadingFlag must not be None"):
            TranslationHistoryCoordinator(translation_service, store, None)

    def test_starts_idle_and_empty(self, coordinator):
        assert coordinator.records == []
        assert coordinator.state is RequestState.IDLE
        assert coordinator.is_loading is False
        assert coordinator.last_translation == ""
        assert coordinator.is_subscribed is False


class TestSubscriptionLifecycle:

    def test_on_start_loads_existing_records(self, coordinator, store):
        store.insert(make_record("hello", "hola", T1))
        store.insert(make_record("bye", "adiós", T1 + timedelta(minutes=1)))
        spy = MagicMock()
        coordinator.records_changed.connect(spy)

        coordinator.on_start()

        assert [r.original_text for r in coordinator.records] == ["bye", "hello"]
        spy.assert_called_once()

    def test_on_start_twice_opens_one_subscription(self, coordinator, store):
        coordinator.on_start()
        coordinator.on_start()
        store.subscribe_ordered.assert_called_once()

    def test_on_start_failure_is_reported_not_raised(self, translation_service):
        store = MagicMock()
        store.subscribe_ordered.side_effect = PersistenceError("Failed to subscribe to translations: denied")
        coordinator = TranslationHistoryCoordinator(translation_service, store, LoadingFlag(), thread_pool=QThreadPool())
        error_spy = MagicMock()
        coordinator.store_error.connect(error_spy)

        coordinator.on_start()

        error_spy.assert_called_once_with("Failed to subscribe to translations: denied")
        assert coordinator.is_subscribed is False

    def test_on_stop_closes_subscription(self, coordinator, store):
        coordinator.on_start()
        coordinator.on_stop()

        store.insert(make_record("hello", "hola", T1))
        QCoreApplication.processEvents()

        assert coordinator.records == []
        assert coordinator.is_subscribed is False

    def test_snapshot_error_keeps_current_records(self, translation_service):
        callbacks = {}

        def subscribe(on_update, on_error):
            callbacks["update"] = on_update
            callbacks["error"] = on_error
            return HistorySubscription(lambda: None)

        store = MagicMock()
        store.subscribe_ordered.side_effect = subscribe
        coordinator = TranslationHistoryCoordinator(translation_service, store, LoadingFlag(), thread_pool=QThreadPool())
        error_spy = MagicMock()
        coordinator.store_error.connect(error_spy)

        coordinator.on_start()
        callbacks["update"]([make_record("hello", "hola", T1)])
        callbacks["error"](PersistenceError("Failed to read translations snapshot: reset"))

        assert [r.original_text for r in coordinator.records] == ["hello"]
        error_spy.assert_called_once_with("Failed to read translations snapshot: reset")

    def test_snapshot_from_foreign_thread_applied_on_owner_thread(self, translation_service):
        callbacks = {}

        def subscribe(on_update, on_error):
            callbacks["update"] = on_update
            return HistorySubscription(lambda: None)

        store = MagicMock()
        store.subscribe_ordered.side_effect = subscribe
        coordinator = TranslationHistoryCoordinator(translation_service, store, LoadingFlag(), thread_pool=QThreadPool())
        delivered_on = []
        coordinator.records_changed.connect(lambda records: delivered_on.append(threading.current_thread()))
        coordinator.on_start()

        sdk_thread = threading.Thread(target=callbacks["update"], args=([make_record("hello", "hola", T1)],))
        sdk_thread.start()
        sdk_thread.join()
        wait_until(lambda: coordinator.records)

        assert delivered_on == [threading.main_thread()]


class TestSubmit:

    def test_empty_text_is_noop(self, coordinator, translation_service, store):
        state_spy = MagicMock()
        coordinator.state_changed.connect(state_spy)

        coordinator.submit("")
        drain(coordinator)

        translation_service.translate.assert_not_called()
        store.insert.assert_not_called()
        state_spy.assert_not_called()

    def test_success_translates_once_and_inserts_once(self, coordinator, translation_service, store):
        coordinator.on_start()

        coordinator.submit("hello")
        drain(coordinator)

        translation_service.translate.assert_called_once_with(text="hello", source_lang="en", target_lang="es")
        store.insert.assert_called_once()
        saved = store.insert.call_args.args[0]
        assert saved.original_text == "hello"
        assert saved.translated_text == "hola"
        assert saved.from_language == "English"
        assert saved.to_language == "Spanish"
        assert saved.id is None

    def test_success_updates_records_through_subscription(self, coordinator):
        coordinator.on_start()
        completed_spy = MagicMock()
        coordinator.translation_completed.connect(completed_spy)

        coordinator.submit("hello")
        drain(coordinator)

        completed_spy.assert_called_once_with("hola")
        assert coordinator.last_translation == "hola"
        assert [(r.original_text, r.translated_text) for r in coordinator.records] == [("hello", "hola")]
        assert coordinator.records[0].id is not None

    def test_success_state_transitions(self, coordinator):
        states = []
        coordinator.state_changed.connect(states.append)

        coordinator.submit("hello")
        drain(coordinator)

        assert states == [RequestState.LOADING, RequestState.PERSISTING, RequestState.IDLE]

    def test_failure_surfaces_error_text_without_insert(self, coordinator, translation_service, store):
        translation_service.translate.return_value = TranslationResult(
            text="", provider="mymemory", error=DecodingError("Response is not valid JSON")
        )
        failed_spy = MagicMock()
        coordinator.translation_failed.connect(failed_spy)
        states = []
        coordinator.state_changed.connect(states.append)

        coordinator.submit("hello")
        drain(coordinator)

        failed_spy.assert_called_once_with("Error: Response is not valid JSON")
        assert coordinator.last_translation == "Error: Response is not valid JSON"
        store.insert.assert_not_called()
        assert states == [RequestState.LOADING, RequestState.IDLE]

    def test_unexpected_worker_error_surfaces(self, coordinator, translation_service, store):
        translation_service.translate.side_effect = RuntimeError("kaboom")
        failed_spy = MagicMock()
        coordinator.translation_failed.connect(failed_spy)

        coordinator.submit("hello")
        drain(coordinator)

        failed_spy.assert_called_once_with("Error: Unexpected translation error: kaboom")
        store.insert.assert_not_called()
        assert coordinator.state is RequestState.IDLE

    def test_no_automatic_retry(self, coordinator, translation_service):
        translation_service.translate.return_value = TranslationResult(
            text="", provider="mymemory", error=DecodingError("bad body")
        )

        coordinator.submit("hello")
        drain(coordinator)

        assert translation_service.translate.call_count == 1

    def test_insert_failure_reported_and_returns_to_idle(self, coordinator, store):
        store.insert.side_effect = PersistenceError("Failed to save translation: offline")
        error_spy = MagicMock()
        coordinator.store_error.connect(error_spy)
        coordinator.on_start()

        coordinator.submit("hello")
        drain(coordinator)

        error_spy.assert_called_once_with("Failed to save translation: offline")
        assert coordinator.state is RequestState.IDLE
        assert coordinator.records == []

    def test_helpers_released_after_completion(self, coordinator):
        coordinator.submit("hello")
        drain(coordinator)
        assert coordinator._pending_requests == set()

    def test_stale_result_not_displayed_but_saved(self, translation_service, store):
        release_first = threading.Event()

        def translate(text, source_lang, target_lang):
            if text == "first":
                release_first.wait(5)
                return TranslationResult(text="primero", provider="mymemory")
            return TranslationResult(text="segundo", provider="mymemory")

        translation_service.translate.side_effect = translate
        pool = QThreadPool()
        pool.setMaxThreadCount(2)
        coordinator = TranslationHistoryCoordinator(translation_service, store, LoadingFlag(), thread_pool=pool)
        completed = []
        coordinator.translation_completed.connect(completed.append)
        coordinator.on_start()

        coordinator.submit("first")
        coordinator.submit("second")
        wait_until(lambda: completed == ["segundo"])
        release_first.set()
        drain(coordinator)

        assert completed == ["segundo"]
        assert coordinator.last_translation == "segundo"
        assert coordinator.state is RequestState.IDLE
        assert sorted(r.original_text for r in coordinator.records) == ["first", "second"]
        coordinator.on_stop()


class TestClearHistory:

    def test_clear_history_empties_records(self, coordinator, store):
        for i in range(3):
            store.insert(make_record(f"text {i}", f"texto {i}", T1 + timedelta(seconds=i)))
        coordinator.on_start()
        cleared_spy = MagicMock()
        coordinator.history_cleared.connect(cleared_spy)

        coordinator.clear_history()
        drain(coordinator)

        cleared_spy.assert_called_once_with(3)
        assert coordinator.records == []
        store.delete_all.assert_called_once()

    def test_clear_history_failure_keeps_records(self, coordinator, store):
        store.insert(make_record("hello", "hola", T1))
        coordinator.on_start()
        store.delete_all.side_effect = PersistenceError("Failed to delete translations: aborted")
        error_spy = MagicMock()
        coordinator.store_error.connect(error_spy)

        coordinator.clear_history()
        drain(coordinator)

        error_spy.assert_called_once_with("Failed to delete translations: aborted")
        assert [r.original_text for r in coordinator.records] == ["hello"]
