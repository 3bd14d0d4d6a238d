"""Services layer - remote translation, workers, and configuration."""

from translate_me.services.settings_manager import SettingsManager

# Translation services
from translate_me.services.translation import TranslationService, TranslationResult, MyMemoryTranslationService

from translate_me.services.api_workers import StoreWorker, TranslationWorker, WorkerSignals
from translate_me.services.factories import create_history_store, create_translation_service

__all__ = [
	"SettingsManager",
	"TranslationService",
	"TranslationResult",
	"MyMemoryTranslationService",
	"TranslationWorker",
	"StoreWorker",
	"WorkerSignals",
	"create_history_store",
	"create_translation_service",
]
