"""Domain layer - translation records, language pair, and errors."""

from .errors import (
    DecodingError,
    EmptyResponseError,
    EncodingError,
    MalformedRecordError,
    NetworkError,
    PersistenceError,
    TranslateMeError,
    TranslationError,
)
from .language_pair import ENGLISH_TO_SPANISH, LanguagePair
from .loading_flag import LoadingFlag
from .translation_record import TranslationRecord

__all__ = [
    "TranslationRecord",
    "LanguagePair",
    "ENGLISH_TO_SPANISH",
    "LoadingFlag",
    "TranslateMeError",
    "TranslationError",
    "EncodingError",
    "NetworkError",
    "EmptyResponseError",
    "DecodingError",
    "PersistenceError",
    "MalformedRecordError",
]
