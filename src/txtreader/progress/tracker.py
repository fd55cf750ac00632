"""Debounced persistence of the current reading position."""

from __future__ import annotations

import logging
import threading
from typing import Callable


logger = logging.getLogger(__name__)


class ProgressTracker:
    """Coalesce rapid position updates into one delayed write of the latest value."""

    def __init__(
        self,
        persist: Callable[[int], None],
        *,
        debounce_seconds: float = 2.0,
    ) -> None:
        self._persist = persist
        self._debounce_seconds = debounce_seconds
        self._pending: int | None = None
        self._timer: threading.Timer | None = None
        self._closed = False
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

    @property
    def pending(self) -> int | None:
        with self._lock:
            return self._pending

    def update(self, line: int) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("ProgressTracker is closed")
            self._pending = line
            if self._timer is not None:
                self._timer.cancel()

            timer = threading.Timer(self._debounce_seconds, self._on_timer)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def flush_now(self) -> None:
        """Cancel the pending timer and persist synchronously."""

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._flush()

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self.flush_now()

    def _on_timer(self) -> None:
        with self._lock:
            if threading.current_thread() is not self._timer:
                return
            self._timer = None
        try:
            self._flush()
        except Exception:  # pragma: no cover
            logger.exception("Failed to persist reading progress")

    def _flush(self) -> None:
        with self._write_lock:
            with self._lock:
                line = self._pending
                self._pending = None
            if line is not None:
                self._persist(line)
