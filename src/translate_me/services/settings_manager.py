"""Settings Manager - Handles history backend and translation API configuration."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class SettingsManager:
    """
    Manages settings read from the environment.

    Values come from a .env file in the project root, falling back to the
    process environment. Blank values count as unset.
    """

    BACKENDS = ("memory", "sqlite", "firestore")
    DEFAULT_BACKEND = "sqlite"
    DEFAULT_SQLITE_PATH = "translations.db"
    DEFAULT_COLLECTION = "translations"

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            project_root: Path to project root where .env is located.
                         If None, searches upward from current file.
        """
        if project_root is None:
            current = Path(__file__).resolve()
            project_root = current.parent.parent.parent.parent

        env_path = project_root / ".env"
        load_dotenv(dotenv_path=env_path)

        self._project_root = project_root

    def get_history_backend(self) -> str:
        """Name of the history store backend.

        Raises:
            ValueError: If the configured backend is unknown.
        """
        backend = (self._get("TRANSLATE_ME_HISTORY_BACKEND") or self.DEFAULT_BACKEND).lower()
        if backend not in self.BACKENDS:
            raise ValueError(
                f"Unknown history backend {backend!r}; expected one of {', '.join(self.BACKENDS)}"
            )
        return backend

    def get_sqlite_path(self) -> Path:
        """SQLite file path, resolved against the project root when relative."""
        path = Path(self._get("TRANSLATE_ME_SQLITE_PATH") or self.DEFAULT_SQLITE_PATH)
        return path if path.is_absolute() else self._project_root / path

    def get_collection_name(self) -> str:
        return self._get("TRANSLATE_ME_COLLECTION") or self.DEFAULT_COLLECTION

    def get_firestore_project_id(self) -> Optional[str]:
        return self._get("FIRESTORE_PROJECT_ID")

    def get_mymemory_email(self) -> Optional[str]:
        return self._get("MYMEMORY_EMAIL")

    def get_http_timeout(self) -> Optional[float]:
        """HTTP timeout in seconds, or None for no timeout.

        Raises:
            ValueError: If the value is not a positive number.
        """
        raw = self._get("TRANSLATE_ME_HTTP_TIMEOUT")
        if raw is None:
            return None
        try:
            timeout = float(raw)
        except ValueError as e:
            raise ValueError(f"Invalid TRANSLATE_ME_HTTP_TIMEOUT: {raw!r}") from e
        if timeout <= 0:
            raise ValueError(f"TRANSLATE_ME_HTTP_TIMEOUT must be positive, got {raw!r}")
        return timeout

    def reload_env(self) -> None:
        """Reload environment variables from .env file."""
        env_path = self._project_root / ".env"
        load_dotenv(dotenv_path=env_path, override=True)

    @staticmethod
    def _get(name: str) -> Optional[str]:
        value = os.getenv(name)
        return value.strip() if value and value.strip() else None
