"""Error hierarchy shared by the translation and history layers."""

from typing import Optional


class TranslateMeError(Exception):
    """Base class for all application errors."""


class TranslationError(TranslateMeError):
    """Base class for failures on the remote translation path."""


class EncodingError(TranslationError):
    """Input text could not be encoded for transport."""


class NetworkError(TranslationError):
    """The HTTP request failed before a usable body arrived."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class EmptyResponseError(TranslationError):
    """The translation endpoint answered with an empty body."""


class DecodingError(TranslationError):
    """The response body did not match the expected JSON envelope."""


class PersistenceError(TranslateMeError):
    """A read or write against the history store failed."""


class MalformedRecordError(TranslateMeError):
    """A stored document could not be mapped to a TranslationRecord."""

    def __init__(self, document_id: Optional[str], reason: str):
        super().__init__(f"Malformed record {document_id!r}: {reason}")
        self.document_id = document_id
        self.reason = reason
