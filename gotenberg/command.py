"""Child processes that can be killed together with all their descendants."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
from typing import IO

from gotenberg.lifecycle import CancelContext

_POLL_SECONDS = 0.01
_READER_JOIN_SECONDS = 1.0


class CommandError(RuntimeError):
    """A command failed; ``exit_code`` tells how."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


def _exit_code(returncode: int) -> int:
    return -1 if returncode < 0 else returncode


class Command:
    """A unix process started in its own process group."""

    def __init__(
        self,
        ctx: CancelContext | None,
        logger: logging.Logger | None,
        bin_path: str,
        args: tuple[str, ...] = (),
    ) -> None:
        base = logger or logging.getLogger("gotenberg")
        self.args = [bin_path, *args]
        self._ctx = ctx
        self._logger = base.getChild(bin_path.replace("/", ""))
        self._process: subprocess.Popen[bytes] | None = None
        self._readers: list[threading.Thread] = []

    def _pipe_reader(self, name: str, stream: IO[bytes]) -> threading.Thread:
        logger = self._logger.getChild(name)

        def pump() -> None:
            try:
                for raw in iter(stream.readline, b""):
                    line = raw.rstrip(b"\n").rstrip(b"\r")
                    if line:
                        logger.debug(line.decode(errors="replace"))
            except (OSError, ValueError) as err:
                logger.error("pipe unix process output error: %s", err)
            finally:
                stream.close()

        thread = threading.Thread(target=pump, daemon=True)
        thread.start()
        return thread

    def start(self) -> None:
        """Start the process without waiting for it."""
        piping = self._logger.isEnabledFor(logging.DEBUG)
        output = subprocess.PIPE if piping else subprocess.DEVNULL
        self._logger.debug("start unix process: %s", " ".join(self.args))
        try:
            self._process = subprocess.Popen(
                self.args,
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=output,
                start_new_session=True,
            )
        except OSError as err:
            raise CommandError(f"start unix process: {err}") from err
        if piping:
            self._readers = [
                self._pipe_reader("stdout", self._process.stdout),
                self._pipe_reader("stderr", self._process.stderr),
            ]

    def _join_readers(self) -> None:
        for reader in self._readers:
            reader.join(_READER_JOIN_SECONDS)

    def wait(self) -> None:
        """Wait for the process to end; raises if it did not exit cleanly."""
        if self._process is None:
            raise CommandError("wait for unix process: not started")
        returncode = self._process.wait()
        self._join_readers()
        if returncode != 0:
            raise CommandError(
                f"wait for unix process: exit status {returncode}",
                exit_code=_exit_code(returncode),
            )

    def _kill_logged(self) -> None:
        try:
            self.kill()
        except CommandError as err:
            self._logger.error(str(err))

    def exec(self) -> int:
        """Run the process to completion or until the context is done.

        The process group is killed in any case. Returns 0 on success and
        raises :class:`CommandError` otherwise.
        """
        if self._ctx is None:
            raise CommandError("nil context", exit_code=10)
        try:
            self.start()
        except CommandError as err:
            raise CommandError(f"start command: {err}", exit_code=131) from err

        while True:
            try:
                returncode = self._process.wait(timeout=_POLL_SECONDS)
                break
            except subprocess.TimeoutExpired:
                if self._ctx.done():
                    self._kill_logged()
                    self._process.wait()
                    self._join_readers()
                    raise CommandError(
                        f"context done: {self._ctx.error()}", exit_code=62
                    ) from None

        self._kill_logged()
        self._join_readers()
        if returncode == 0:
            return 0
        raise CommandError(
            f"unix process error: exit status {returncode}",
            exit_code=_exit_code(returncode),
        )

    def kill(self) -> None:
        """Kill the process and all its children."""
        if self._process is None:
            return
        try:
            os.killpg(self._process.pid, signal.SIGKILL)
        except ProcessLookupError:
            self._logger.debug("unix process already killed")
            return
        except OSError as err:
            raise CommandError(f"kill unix process: {err}") from err
        self._logger.debug("unix process killed")


def command(logger: logging.Logger | None, bin_path: str, *args: str) -> Command:
    """A command without a context."""
    return Command(None, logger, bin_path, args)


def command_context(
    ctx: CancelContext | None, logger: logging.Logger | None, bin_path: str, *args: str
) -> Command:
    """A command bound to ``ctx``; the process is killed once it is done."""
    if ctx is None:
        raise CommandError("nil context")
    return Command(ctx, logger, bin_path, args)