"""QThreadPool runnables for translation and history store calls."""

from typing import Any, Callable

from PySide6.QtCore import QObject, QRunnable, Signal, Slot

from translate_me.core import LanguagePair, PersistenceError
from translate_me.services.translation import TranslationService


class WorkerSignals(QObject):
    """
    Result channel shared by translation and store workers.

    Lives on the creating thread; emits from the pool are queued to the
    coordinator's helper objects.
    """
    finished = Signal()
    error = Signal(str)
    translation_result = Signal(object)  # TranslationResult
    store_result = Signal(object)  # operation return value


class TranslationWorker(QRunnable):
    """
    Translates one submitted text with the configured language pair.

    Service-level failures travel inside the TranslationResult; only
    exceptions the service did not map reach the error signal.
    """

    def __init__(
        self,
        translation_service: TranslationService,
        text: str,
        language_pair: LanguagePair,
    ):
        super().__init__()
        self.translation_service = translation_service
        self.text = text
        self.language_pair = language_pair
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self):
        """Call the translation service off the coordinator thread."""
        try:
            result = self.translation_service.translate(
                text=self.text,
                source_lang=self.language_pair.source_code,
                target_lang=self.language_pair.target_code,
            )
            self.signals.translation_result.emit(result)
        except Exception as e:
            self.signals.error.emit(f"Unexpected translation error: {e}")
        finally:
            self.signals.finished.emit()


class StoreWorker(QRunnable):
    """
    Worker that runs one history store operation in a background thread.

    ``operation`` is a zero-argument callable such as ``store.delete_all``.
    """

    def __init__(self, operation: Callable[[], Any], description: str):
        super().__init__()
        self.operation = operation
        self.description = description
        self.signals = WorkerSignals()
        self.setAutoDelete(True)

    @Slot()
    def run(self):
        """Run the history store operation off the coordinator thread."""
        try:
            value = self.operation()
            self.signals.store_result.emit(value)
        except PersistenceError as e:
            self.signals.error.emit(str(e))
        except Exception as e:
            self.signals.error.emit(f"Unexpected {self.description} error: {e}")
        finally:
            self.signals.finished.emit()
