"""Typed access to environment variables."""

from __future__ import annotations

import os
import re

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class EnvironmentVariableError(LookupError):
    """An environment variable is missing, empty or malformed."""


def string_env(key: str) -> str:
    """Return the value of ``key``; it must exist and not be empty."""
    value = os.environ.get(key)
    if value is None:
        raise EnvironmentVariableError(f"environment variable '{key}' does not exist")
    if value == "":
        raise EnvironmentVariableError(f"environment variable '{key}' is empty")
    return value


def int_env(key: str) -> int:
    """Return the value of ``key`` as an integer."""
    value = string_env(key)
    if not _INT_PATTERN.fullmatch(value):
        raise EnvironmentVariableError(
            f"get int value of environment variable '{key}': invalid syntax"
        )
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise EnvironmentVariableError(
            f"get int value of environment variable '{key}': value out of range"
        )
    return number