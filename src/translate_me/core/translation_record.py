"""Domain entity for a single persisted translation."""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .errors import MalformedRecordError
from .language_pair import LanguagePair


@dataclass(frozen=True)
class TranslationRecord:
    """A translation the user requested, as stored in the history.

    Attributes:
        original_text: Text the user typed.
        translated_text: Text returned by the translation API.
        from_language: Human-readable source language label.
        to_language: Human-readable target language label.
        timestamp: Creation instant (UTC); the only sort key.
        id: Store-assigned document id, None until persisted.
    """

    original_text: str
    translated_text: str
    from_language: str
    to_language: str
    timestamp: datetime
    id: Optional[str] = None

    TEXT_FIELDS = {
        "originalText": "original_text",
        "translatedText": "translated_text",
        "fromLanguage": "from_language",
        "toLanguage": "to_language",
    }

    def __post_init__(self):
        # Every store sorts on this value; naive datetimes count as UTC
        object.__setattr__(self, "timestamp", _as_utc(self.timestamp))

    @classmethod
    def create(
        cls,
        original_text: str,
        translated_text: str,
        language_pair: LanguagePair,
        timestamp: Optional[datetime] = None,
    ) -> "TranslationRecord":
        """Build a transient record stamped with the current UTC time."""
        return cls(
            original_text=original_text,
            translated_text=translated_text,
            from_language=language_pair.source_label,
            to_language=language_pair.target_label,
            timestamp=timestamp or datetime.now(timezone.utc),
        )

    def with_id(self, doc_id: str) -> "TranslationRecord":
        return replace(self, id=doc_id)

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the document shape shared by every store backend."""
        return {
            "originalText": self.original_text,
            "translatedText": self.translated_text,
            "fromLanguage": self.from_language,
            "toLanguage": self.to_language,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_document(
        cls, doc_id: Optional[str], data: Optional[Mapping[str, Any]]
    ) -> "TranslationRecord":
        """Map a stored document back to a record.

        Raises:
            MalformedRecordError: If a field is missing, has the wrong type,
                or the original text is empty.
        """
        if not isinstance(data, Mapping):
            raise MalformedRecordError(doc_id, "document has no data")

        values: Dict[str, Any] = {}
        for key, attr in cls.TEXT_FIELDS.items():
            if key not in data:
                raise MalformedRecordError(doc_id, f"missing field '{key}'")
            value = data[key]
            if not isinstance(value, str):
                raise MalformedRecordError(doc_id, f"field '{key}' is not text")
            values[attr] = value

        if not values["original_text"]:
            raise MalformedRecordError(doc_id, "field 'originalText' is empty")

        if "timestamp" not in data:
            raise MalformedRecordError(doc_id, "missing field 'timestamp'")

        return cls(
            timestamp=_parse_timestamp(doc_id, data["timestamp"]),
            id=doc_id,
            **values,
        )


def _parse_timestamp(doc_id: Optional[str], raw: Any) -> datetime:
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, str):
        try:
            value = datetime.fromisoformat(raw)
        except ValueError as e:
            raise MalformedRecordError(doc_id, f"bad timestamp {raw!r}") from e
    else:
        raise MalformedRecordError(doc_id, "field 'timestamp' is not a date")

    return _as_utc(value)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
