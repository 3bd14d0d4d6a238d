"""Translation services - abstract interface and MyMemory implementation."""

from translate_me.services.translation.translation_service import TranslationService, TranslationResult
from translate_me.services.translation.mymemory_translation_service import MyMemoryTranslationService

__all__ = [
    "TranslationService",
    "TranslationResult",
    "MyMemoryTranslationService",
]
