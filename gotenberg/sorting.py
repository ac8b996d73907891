"""Alphanumeric ordering of file names by numeric prefix or suffix."""

from __future__ import annotations

import functools
import re
from collections.abc import Iterable

_PREFIX = re.compile(r"^([0-9]+)(.*)$")
_EXTENSION_SUFFIX = re.compile(r"^(.*?)([0-9]+)(\.[^.]+)$")
_SUFFIX = re.compile(r"^(.*?)([0-9]+)$")
_INT64_MAX = 2**63 - 1


def _base(path: str) -> str:
    if path == "":
        return "."
    stripped = path.rstrip("/")
    if stripped == "":
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _to_int(digits: str) -> int | None:
    number = int(digits)
    return number if number <= _INT64_MAX else None


def extract_number(name: str) -> tuple[int, str]:
    """Split the base name into its number and the remaining text.

    A numeric prefix wins, then a number just before the extension, then a
    trailing number. Without any number, ``(-1, base_name)`` is returned.
    """
    base = _base(name)

    match = _PREFIX.match(base)
    if match and (number := _to_int(match.group(1))) is not None:
        return number, match.group(2)

    match = _EXTENSION_SUFFIX.match(base)
    if match and (number := _to_int(match.group(2))) is not None:
        return number, match.group(1) + match.group(3)

    match = _SUFFIX.match(base)
    if match and (number := _to_int(match.group(2))) is not None:
        return number, match.group(1)

    return -1, base


def alphanumeric_less(a: str, b: str) -> bool:
    """Return whether ``a`` sorts before ``b``."""
    num_a, rest_a = extract_number(a)
    num_b, rest_b = extract_number(b)

    if num_a != -1 and num_b != -1:
        if num_a != num_b:
            return num_a < num_b
        return rest_a < rest_b
    if num_a != -1:
        return True
    if num_b != -1:
        return False
    return a < b


def _compare(a: str, b: str) -> int:
    if alphanumeric_less(a, b):
        return -1
    if alphanumeric_less(b, a):
        return 1
    return 0


def alphanumeric_sort(values: Iterable[str]) -> list[str]:
    """Return the values sorted alphanumerically."""
    return sorted(values, key=functools.cmp_to_key(_compare))