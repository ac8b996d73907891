"""Application version, shutdown signalling and cancellable contexts."""

from __future__ import annotations

import threading
import time

VERSION = "snapshot"


class CancelGracefulShutdown(Exception):
    """Raised by an app that wants the graceful shutdown to end right away."""

    def __init__(self, message: str = "cancel graceful shutdown's context") -> None:
        super().__init__(message)


class Canceled(Exception):
    """The context was cancelled explicitly."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(TimeoutError):
    """The context deadline passed before the work completed."""

    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class CancelContext:
    """A thread-safe cancellation token with an optional deadline in seconds."""

    def __init__(self, timeout: float | None = None) -> None:
        self._deadline = None if timeout is None else time.monotonic() + timeout
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._error: Exception | None = None

    def __enter__(self) -> CancelContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()

    def _finish(self, error: Exception) -> None:
        with self._lock:
            if self._error is None:
                self._error = error
                self._event.set()

    def _check_deadline(self) -> None:
        if (
            self._deadline is not None
            and self._error is None
            and time.monotonic() >= self._deadline
        ):
            self._finish(DeadlineExceeded())

    def cancel(self) -> None:
        """Cancel the context; later calls have no effect."""
        self._finish(Canceled())

    def done(self) -> bool:
        """Return whether the context is cancelled or past its deadline."""
        self._check_deadline()
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the context is done or ``timeout`` seconds pass."""
        end = None if timeout is None else time.monotonic() + timeout
        while not self.done():
            now = time.monotonic()
            if end is not None and now >= end:
                return False
            bounds = [limit - now for limit in (end, self._deadline) if limit is not None]
            self._event.wait(max(0.0, min(bounds)) if bounds else None)
        return True

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def error(self) -> Exception | None:
        """The reason the context ended, or None while it is still live."""
        self._check_deadline()
        return self._error