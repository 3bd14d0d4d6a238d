"""Language pair value object."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LanguagePair:
    """Source/target languages as API codes plus human-readable labels."""

    source_code: str
    target_code: str
    source_label: str
    target_label: str

    @property
    def langpair(self) -> str:
        """Pair in the ``src|dst`` form the translation endpoint expects."""
        return f"{self.source_code}|{self.target_code}"


ENGLISH_TO_SPANISH = LanguagePair(
    source_code="en",
    target_code="es",
    source_label="English",
    target_label="Spanish",
)
