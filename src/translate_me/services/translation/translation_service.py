"""Translation Service - abstract interface for remote translation providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from translate_me.core import TranslationError


@dataclass
class TranslationResult:
    """Result of a translation request."""

    text: str
    provider: str
    error: Optional[TranslationError] = None

    @property
    def is_error(self) -> bool:
        """True if translation failed."""
        return self.error is not None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None


class TranslationService(ABC):
    """
    Abstract service for translating text between two languages.

    Implementations (e.g., MyMemoryTranslationService) handle API calls and
    report failures in the result instead of raising them.
    """

    @abstractmethod
    def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        """
        Translate text.

        Args:
            text: Non-empty text to translate.
            source_lang: Source language code (e.g. "en").
            target_lang: Target language code (e.g. "es").

        Returns:
            TranslationResult with text or a TranslationError.

        Raises:
            ValueError: If text is empty.
        """
        pass
