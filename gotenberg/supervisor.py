"""Supervision of a long-running process shared by queued tasks."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

from gotenberg.lifecycle import CancelContext, Canceled, DeadlineExceeded

_POLL_SECONDS = 0.01
T = TypeVar("T")


class ProcessAlreadyRestarting(RuntimeError):
    """The supervisor was asked to restart a process already restarting."""

    def __init__(self, message: str = "process already restarting") -> None:
        super().__init__(message)


class MaximumQueueSizeExceeded(RuntimeError):
    """The request queue is full."""

    def __init__(self, message: str = "maximum queue size exceeded") -> None:
        super().__init__(message)


@runtime_checkable
class Process(Protocol):
    """A process that can be started, stopped and probed."""

    def start(self, logger: logging.Logger) -> None: ...

    def stop(self, logger: logging.Logger) -> None: ...

    def healthy(self, logger: logging.Logger) -> bool: ...


def _context_error(ctx: CancelContext, prefix: str = "") -> Exception:
    err = ctx.error() or Canceled()
    message = f"{prefix}: {err}" if prefix else str(err)
    return type(err)(message)


def _wrapped(prefix: str, err: Exception) -> Exception:
    if isinstance(err, (ProcessAlreadyRestarting, DeadlineExceeded, Canceled)):
        return type(err)(f"{prefix}: {err}")
    return RuntimeError(f"{prefix}: {err}")


class ProcessSupervisor:
    """Runs tasks one at a time against a process it keeps healthy.

    The process is started on first use, restarted when unhealthy, and
    restarted eagerly once ``max_req_limit`` tasks have run (0 disables
    this). At most ``max_queue_size`` tasks may wait (0 means no limit).
    """

    def __init__(
        self,
        logger: logging.Logger | None,
        process: Process,
        max_req_limit: int = 0,
        max_queue_size: int = 0,
    ) -> None:
        self._logger = logger or logging.getLogger("gotenberg.supervisor")
        self._process = process
        self._max_req_limit = max_req_limit
        self._max_queue_size = max_queue_size
        self._slot = threading.Semaphore(1)
        self._state = threading.Lock()
        self._first_start = False
        self._is_restarting = False
        self._req_counter = 0
        self._queue_size = 0
        self._restarts = 0

    def launch(self) -> None:
        """Start the process."""
        self._logger.debug("start process")
        try:
            self._process.start(self._logger)
        except Exception as err:
            raise RuntimeError(f"start process: {err}") from err
        self._first_start = True
        self._logger.debug("process successfully started")

    def shutdown(self) -> None:
        """Stop the process."""
        self._logger.debug("shutdown process")
        try:
            self._process.stop(self._logger)
        except Exception as err:
            raise RuntimeError(f"shutdown process: {err}") from err
        self._logger.debug("process successfully shutdown")

    def _restart(self) -> None:
        with self._state:
            if self._is_restarting:
                self._logger.debug("process already restarting, skip restart")
                raise ProcessAlreadyRestarting()
            self._is_restarting = True
        self._logger.debug("restart process")
        try:
            try:
                self.shutdown()
            except Exception as err:
                self._logger.debug("stop process before restart: %s", err)
            try:
                self.launch()
            except Exception as err:
                raise RuntimeError(f"restart process: {err}") from err
            with self._state:
                self._req_counter = 0
                self._restarts += 1
            self._logger.debug("process successfully restarted")
        finally:
            with self._state:
                self._is_restarting = False

    def healthy(self) -> bool:
        """Whether the process is healthy; a non-started or restarting one is."""
        if not self._first_start:
            return True
        if self._is_restarting:
            return True
        return self._process.healthy(self._logger)

    def _run_with_deadline(self, ctx: CancelContext, task: Callable[[], T]) -> T:
        outcome: dict[str, Any] = {}
        finished = threading.Event()

        def target() -> None:
            try:
                outcome["value"] = task()
            except Exception as err:
                outcome["error"] = err
            finally:
                finished.set()

        threading.Thread(target=target, daemon=True).start()
        while True:
            if ctx.done():
                raise _context_error(ctx)
            if finished.wait(_POLL_SECONDS):
                break
        if "error" in outcome:
            raise outcome["error"]
        return outcome.get("value")

    def _acquire(self, ctx: CancelContext, logger: logging.Logger) -> None:
        while not self._slot.acquire(timeout=_POLL_SECONDS):
            if ctx.done():
                logger.debug("failed to acquire process lock before deadline")
                with self._state:
                    self._queue_size -= 1
                raise _context_error(ctx, "acquire process lock")

    def _eager_restart(self, logger: logging.Logger) -> None:
        try:
            self._run_with_deadline(CancelContext(), self._restart)
        except Exception as err:
            self._logger.error("process restart after task: %s", err)
        logger.debug("process lock released")
        self._slot.release()

    def _run_once(self, ctx: CancelContext, logger: logging.Logger, task: Callable[[], T]) -> T:
        self._acquire(ctx, logger)
        logger.debug("process lock acquired")
        with self._state:
            self._queue_size -= 1
            self._req_counter += 1
        release = True
        try:
            if not self._first_start:
                try:
                    self._run_with_deadline(ctx, self.launch)
                except Exception as err:
                    raise _wrapped("process first start", err) from err

            if not self.healthy():
                self._logger.debug("process is unhealthy, cannot handle task, restarting...")
                try:
                    self._run_with_deadline(ctx, self._restart)
                except Exception as err:
                    raise _wrapped("process restart before task", err) from err

            try:
                return self._run_with_deadline(ctx, task)
            finally:
                if self._max_req_limit > 0 and self._req_counter >= self._max_req_limit:
                    self._logger.debug("max request limit reached, restarting eagerly...")
                    release = False
                    threading.Thread(
                        target=self._eager_restart, args=(logger,), daemon=True
                    ).start()
        finally:
            if release:
                logger.debug("process lock released")
                self._slot.release()

    def run(
        self, ctx: CancelContext, logger: logging.Logger | None, task: Callable[[], T]
    ) -> T:
        """Run ``task`` once the process is free, started and healthy.

        Raises :class:`MaximumQueueSizeExceeded` when the queue is full, the
        context's error when it ends first, and whatever the task raises.
        """
        logger = logger or self._logger
        with self._state:
            if self._max_queue_size > 0 and self._queue_size >= self._max_queue_size:
                raise MaximumQueueSizeExceeded()
            self._queue_size += 1

        while True:
            try:
                return self._run_once(ctx, logger, task)
            except ProcessAlreadyRestarting:
                logger.debug(
                    "process is already restarting, trying to acquire process lock again..."
                )
                with self._state:
                    self._queue_size += 1

    def req_queue_size(self) -> int:
        """The number of tasks waiting for the process."""
        with self._state:
            return self._queue_size

    def restarts_count(self) -> int:
        """The number of successful restarts."""
        with self._state:
            return self._restarts