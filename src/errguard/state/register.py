"""Global error register - the current error plus a bounded history.

Every operation runs as one critical section, so ``set_error`` (which also
appends to history) cannot interleave with another writer. Listeners are
notified synchronously after the lock is released.
"""

import logging
import threading
from collections import deque
from typing import Callable, Optional

from errguard.errors.taxonomy import NormalizedError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAPACITY = 10

Listener = Callable[["ErrorRegister"], None]


class ErrorRegister:
    """Process-wide last error, visibility flag and newest-first history."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._lock = threading.RLock()
        self._current: Optional[NormalizedError] = None
        self._visible = False
        self._history: deque[NormalizedError] = deque(maxlen=capacity)
        self._listeners: list[Listener] = []

    @property
    def current_error(self) -> Optional[NormalizedError]:
        with self._lock:
            return self._current

    @property
    def is_visible(self) -> bool:
        with self._lock:
            return self._visible

    @property
    def history(self) -> tuple[NormalizedError, ...]:
        """Snapshot of the history, newest first."""
        with self._lock:
            return tuple(self._history)

    def set_error(self, error: Optional[NormalizedError]) -> None:
        """Replace the current error; non-null errors become visible and go to history."""
        with self._lock:
            self._current = error
            self._visible = error is not None
            if error is not None:
                self._history.appendleft(error)
        if error is not None:
            logger.debug(f"Register error set: {error.category.value} - {error.message}")
        self._notify()

    def clear_error(self) -> None:
        with self._lock:
            self._current = None
            self._visible = False
        self._notify()

    def show(self) -> None:
        with self._lock:
            self._visible = True
        self._notify()

    def hide(self) -> None:
        with self._lock:
            self._visible = False
        self._notify()

    def add_to_history(self, error: NormalizedError) -> None:
        """Front-insert into history, dropping the oldest beyond capacity."""
        with self._lock:
            self._history.appendleft(error)
        self._notify()

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every mutation. Returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(self)
