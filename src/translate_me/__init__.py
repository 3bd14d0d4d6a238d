"""
TranslateMe - translate text and keep a history of translations.

This package provides the non-visual core of the application:
- Remote translation through the MyMemory API
- Translation history stores (in-memory, SQLite, Firestore) with live updates
- A Qt coordinator that ties both together for a presentation layer
"""

__version__ = "0.1.0"

# Make key components available at package level
from translate_me.core import TranslationRecord, LanguagePair, ENGLISH_TO_SPANISH
from translate_me.coordinators import TranslationHistoryCoordinator

__all__ = [
    "TranslationRecord",
    "LanguagePair",
    "ENGLISH_TO_SPANISH",
    "TranslationHistoryCoordinator",
]
