"""Observable loading indicator shared between the client and the coordinator."""

import threading
from contextlib import contextmanager
from typing import Iterator

from PySide6.QtCore import QObject, Signal


class LoadingFlag(QObject):
    """Thread-safe busy indicator.

    Activity is counted, so overlapping calls keep the flag raised until the
    last one finishes. ``changed`` fires only on transitions.
    """

    changed = Signal(bool)

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self._active_count = 0

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._active_count > 0

    @contextmanager
    def active(self) -> Iterator[None]:
        """Raise the flag for the duration of the block, on every exit path."""
        self._enter()
        try:
            yield
        finally:
            self._exit()

    def _enter(self) -> None:
        with self._lock:
            self._active_count += 1
            transitioned = self._active_count == 1
        if transitioned:
            self.changed.emit(True)

    def _exit(self) -> None:
        with self._lock:
            self._active_count -= 1
            transitioned = self._active_count == 0
        if transitioned:
            self.changed.emit(False)
