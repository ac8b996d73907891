"""Leveled logging adapter and the logger provider capability."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class LoggerProvider(Protocol):
    """A module that creates loggers for other modules."""

    def logger(self, mod: Any) -> logging.Logger: ...


def _format_value(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class LeveledLogger:
    """Logs a message followed by its key/value pairs at a given level."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("gotenberg")

    def _log(self, level: int, msg: str, args: tuple[Any, ...]) -> None:
        pairs = " ".join(_format_value(value) for value in args)
        self._logger.log(level, "%s: [%s]", msg, pairs)

    def error(self, msg: str, *args: Any) -> None:
        """Log at the error level."""
        self._log(logging.ERROR, msg, args)

    def warn(self, msg: str, *args: Any) -> None:
        """Log at the warning level."""
        self._log(logging.WARNING, msg, args)

    def info(self, msg: str, *args: Any) -> None:
        """Log at the info level."""
        self._log(logging.INFO, msg, args)

    def debug(self, msg: str, *args: Any) -> None:
        """Log at the debug level."""
        self._log(logging.DEBUG, msg, args)