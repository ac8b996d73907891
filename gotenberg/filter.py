"""Allow/deny filtering of strings by regular expressions under a deadline."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any

import regex

from gotenberg.lifecycle import DeadlineExceeded


class Filtered(ValueError):
    """The value is not allowed or is explicitly denied."""


def _compile(expression: Any) -> Any:
    if expression is None:
        return regex.compile("")
    if hasattr(expression, "search"):
        return expression
    return regex.compile(expression)


def _matches(pattern: Any, s: str, deadline: datetime) -> bool:
    limit = deadline.timestamp()
    remaining = limit - time.time()
    if remaining <= 0:
        raise DeadlineExceeded()
    try:
        return pattern.search(s, timeout=remaining) is not None
    except TimeoutError as err:
        if time.time() >= limit:
            raise DeadlineExceeded() from err
        raise RuntimeError(f"'{pattern.pattern}' cannot handle '{s}': {err}") from err


def filter_deadline(allowed: Any, denied: Any, s: str, deadline: datetime) -> None:
    """Check ``s`` against the allowed and denied expressions.

    An empty expression is ignored. Raises :class:`Filtered` if ``s`` is
    rejected and :class:`DeadlineExceeded` if matching passes ``deadline``.
    """
    allow = _compile(allowed)
    if allow.pattern and not _matches(allow, s, deadline):
        raise Filtered(f"'{s}' does not match the expression from the allowed list")

    deny = _compile(denied)
    if deny.pattern and _matches(deny, s, deadline):
        raise Filtered(f"'{s}' matches the expression from the denied list")