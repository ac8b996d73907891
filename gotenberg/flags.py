"""Typed command-line flags with a GNU-style long-option parser."""

from __future__ import annotations

import csv
import decimal
import io
import math
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import regex

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

STRING = "string"
STRING_SLICE = "stringSlice"
BOOL = "bool"
INT = "int"
INT64 = "int64"
FLOAT64 = "float64"
DURATION = "duration"
_KINDS = (STRING, STRING_SLICE, BOOL, INT, INT64, FLOAT64, DURATION)


class FlagError(ValueError):
    """A flag is undefined, of another type, or was given an invalid value."""


# Durations ------------------------------------------------------------------

_UNIT_NS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_PART = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")


def _parse_duration_ns(text: str) -> int:
    invalid = FlagError(f'time: invalid duration "{text}"')
    body = text
    negative = False
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    if body == "0":
        return 0
    if not body:
        raise invalid

    total = 0
    pos = 0
    while pos < len(body):
        match = _DURATION_PART.match(body, pos)
        whole, frac, unit = match.group(1), match.group(2), match.group(3)
        if whole == "" and not frac:
            raise invalid
        if unit == "":
            raise FlagError(f'time: missing unit in duration "{text}"')
        scale = _UNIT_NS.get(unit)
        if scale is None:
            raise FlagError(f'time: unknown unit "{unit}" in duration "{text}"')
        total += int(whole or "0") * scale
        if frac:
            total += int(frac) * scale // 10 ** len(frac)
        if total > _INT64_MAX:
            raise invalid
        pos = match.end()

    return -total if negative else total


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``"1h30m"``, ``"2s"`` or ``"500ms"``."""
    ns = _parse_duration_ns(text)
    magnitude = timedelta(microseconds=abs(ns) // 1000)
    return -magnitude if ns < 0 else magnitude


def _to_ns(value: timedelta | float) -> int:
    if isinstance(value, timedelta):
        return (value // timedelta(microseconds=1)) * 1000
    return round(value * 1_000_000_000)


def _fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    text = str(whole)
    if frac:
        text += "." + str(frac).rjust(precision, "0").rstrip("0")
    return text


def format_duration(seconds: timedelta | float) -> str:
    """Render a duration (a timedelta or seconds) as e.g. ``"1m30s"``."""
    ns = _to_ns(seconds)
    sign = "-" if ns < 0 else ""
    magnitude = abs(ns)
    if magnitude == 0:
        return "0s"
    if magnitude < 1_000:
        return f"{sign}{magnitude}ns"
    if magnitude < 1_000_000:
        return f"{sign}{_fraction(magnitude, 3)}µs"
    if magnitude < 1_000_000_000:
        return f"{sign}{_fraction(magnitude, 6)}ms"

    whole_seconds, frac = divmod(magnitude, 1_000_000_000)
    text = _fraction((whole_seconds % 60) * 1_000_000_000 + frac, 9) + "s"
    minutes = whole_seconds // 60
    if minutes:
        text = f"{minutes % 60}m{text}"
        hours = minutes // 60
        if hours:
            text = f"{hours}h{text}"
    return sign + text


# Human-readable byte sizes --------------------------------------------------

_BYTES = re.compile(r"(-?[0-9]+(?:\.[0-9]+)?)[ \t\n\r\f\v]?([KMGTPE]i?B?|B?)", re.IGNORECASE)
_BYTE_EXPONENTS = {"K": 1, "M": 2, "G": 3, "T": 4, "P": 5, "E": 6}


def parse_bytes(text: str) -> int:
    """Parse sizes such as ``"1MB"`` (10**6) or ``"1MiB"`` (2**20)."""
    match = _BYTES.fullmatch(text)
    if match is None:
        raise ValueError(f"error parsing value={text}")
    amount = float(match.group(1))
    unit = match.group(2).upper()
    if unit in ("", "B"):
        return int(amount)
    base = 1024 if "I" in unit else 1000
    return int(amount * base ** _BYTE_EXPONENTS[unit[0]])


# Value parsing --------------------------------------------------------------

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}
_OCTAL = re.compile(r"[+-]?0[0-7_]+")


def _parse_bool(raw: str) -> bool:
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError("invalid syntax")


def _parse_int(raw: str) -> int:
    if not raw or raw != raw.strip():
        raise ValueError("invalid syntax")
    try:
        number = int(raw, 0)
    except ValueError:
        if not _OCTAL.fullmatch(raw) or "__" in raw or raw.endswith("_"):
            raise ValueError("invalid syntax") from None
        number = int(raw.replace("_", ""), 8)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise ValueError("value out of range")
    return number


def _parse_float(raw: str) -> float:
    if not raw or raw != raw.strip() or "_" in raw:
        raise ValueError("invalid syntax")
    return float(raw)


def _read_csv(raw: str) -> list[str]:
    if raw == "":
        return []
    try:
        return next(csv.reader([raw], strict=True))
    except csv.Error as err:
        raise ValueError(str(err)) from err


def _write_csv(items: list[str]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="").writerow(items)
    return buffer.getvalue()


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = repr(value)
    if "e" in text:
        exponent = int(text.split("e")[1])
        if -4 <= exponent < 21:
            return format(decimal.Decimal(text), "f")
        return text
    return text[:-2] if text.endswith(".0") else text


_PARSERS: dict[str, Callable[[str], Any]] = {
    STRING: str,
    BOOL: _parse_bool,
    INT: _parse_int,
    INT64: _parse_int,
    FLOAT64: _parse_float,
    DURATION: parse_duration,
}


def _normalize(kind: str, default: Any) -> Any:
    if kind == STRING:
        return "" if default is None else str(default)
    if kind == STRING_SLICE:
        return list(default or [])
    if kind == BOOL:
        return bool(default)
    if kind in (INT, INT64):
        return int(default or 0)
    if kind == FLOAT64:
        return float(default or 0.0)
    if isinstance(default, timedelta):
        return default
    if isinstance(default, str):
        return parse_duration(default)
    return timedelta(seconds=default or 0)


@dataclass
class Flag:
    """A named, typed flag and its current value."""

    name: str
    kind: str
    default: Any = None
    usage: str = ""
    value: Any = field(init=False)
    changed: bool = field(default=False, init=False)
    _appending: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise FlagError(f"unsupported flag type: {self.kind}")
        self.default = _normalize(self.kind, self.default)
        self.value = list(self.default) if self.kind == STRING_SLICE else self.default

    def set(self, raw: str) -> None:
        """Set the value from its textual form.

        A string slice parses ``raw`` as comma-separated values; the first
        call replaces the default and later calls append.
        """
        try:
            if self.kind == STRING_SLICE:
                items = _read_csv(raw)
                self.value = [*self.value, *items] if self._appending else items
                self._appending = True
                return
            self.value = _PARSERS[self.kind](raw)
        except ValueError as err:
            raise FlagError(f'invalid argument "{raw}" for "--{self.name}" flag: {err}') from err

    def replace(self, items: Iterable[str]) -> None:
        """Replace the whole value of a slice flag."""
        if not self.is_slice():
            raise FlagError(f"flag {self.name} is not a slice")
        self.value = list(items)

    def is_slice(self) -> bool:
        """Whether the flag holds a list of values."""
        return self.kind == STRING_SLICE

    def value_string(self) -> str:
        """The current value in its textual form."""
        if self.kind == STRING:
            return self.value
        if self.kind == STRING_SLICE:
            return "[" + _write_csv(self.value) + "]"
        if self.kind == BOOL:
            return "true" if self.value else "false"
        if self.kind == FLOAT64:
            return _format_float(self.value)
        if self.kind == DURATION:
            return format_duration(self.value)
        return str(self.value)


class FlagSet:
    """A set of flags and the parser for ``--name=value`` arguments."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.args: list[str] = []
        self._flags: dict[str, Flag] = {}

    def __iter__(self) -> Iterator[Flag]:
        return (self._flags[name] for name in sorted(self._flags))

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def _define(self, name: str, kind: str, default: Any, usage: str) -> Flag:
        if name in self._flags:
            raise FlagError(f"{self.name} flag redefined: {name}")
        flag = Flag(name, kind, default, usage)
        self._flags[name] = flag
        return flag

    def string(self, name: str, default: str = "", usage: str = "") -> Flag:
        """Define a string flag."""
        return self._define(name, STRING, default, usage)

    def string_slice(self, name: str, default: Iterable[str] = (), usage: str = "") -> Flag:
        """Define a string slice flag."""
        return self._define(name, STRING_SLICE, default, usage)

    def boolean(self, name: str, default: bool = False, usage: str = "") -> Flag:
        """Define a boolean flag."""
        return self._define(name, BOOL, default, usage)

    def integer(self, name: str, default: int = 0, usage: str = "") -> Flag:
        """Define an int flag."""
        return self._define(name, INT, default, usage)

    def int64(self, name: str, default: int = 0, usage: str = "") -> Flag:
        """Define an int64 flag."""
        return self._define(name, INT64, default, usage)

    def float64(self, name: str, default: float = 0.0, usage: str = "") -> Flag:
        """Define a float flag."""
        return self._define(name, FLOAT64, default, usage)

    def duration(self, name: str, default: timedelta | float = 0, usage: str = "") -> Flag:
        """Define a duration flag; a numeric default is in seconds."""
        return self._define(name, DURATION, default, usage)

    def add_flag_set(self, other: FlagSet | None) -> None:
        """Add the flags of ``other`` whose names are not yet defined."""
        if other is None:
            return
        for flag in other:
            self._flags.setdefault(flag.name, flag)

    def lookup(self, name: str) -> Flag | None:
        """The flag named ``name``, or None."""
        return self._flags.get(name)

    def changed(self, name: str) -> bool:
        """Whether the flag was set on the command line."""
        flag = self._flags.get(name)
        return flag is not None and flag.changed

    def parse(self, args: Iterable[str]) -> None:
        """Parse ``args``; non-flag arguments end up in :attr:`args`."""
        positional: list[str] = []
        remaining = iter(args)
        for arg in remaining:
            if arg == "--":
                positional.extend(remaining)
                break
            if arg == "-" or not arg.startswith("-"):
                positional.append(arg)
                continue
            if not arg.startswith("--"):
                raise FlagError(f"unknown shorthand flag: '{arg[1]}' in {arg}")
            name, sep, raw = arg[2:].partition("=")
            if not name or name.startswith("-"):
                raise FlagError(f"bad flag syntax: {arg}")
            flag = self._flags.get(name)
            if flag is None:
                raise FlagError(f"unknown flag: --{name}")
            if not sep:
                if flag.kind == BOOL:
                    raw = "true"
                else:
                    next_arg = next(remaining, None)
                    if next_arg is None:
                        raise FlagError(f"flag needs an argument: --{name}")
                    raw = next_arg
            flag.set(raw)
            flag.changed = True
        self.args = positional

    def get(self, name: str, kind: str) -> Any:
        """The value of flag ``name``, which must be of type ``kind``."""
        flag = self._flags.get(name)
        if flag is None:
            raise FlagError(f"flag accessed but not defined: {name}")
        if flag.kind != kind:
            raise FlagError(f"trying to get {kind} value of flag of type {flag.kind}")
        return list(flag.value) if flag.is_slice() else flag.value

    def visit_all(self, fn: Callable[[Flag], Any]) -> None:
        """Call ``fn`` on every flag in name order."""
        for flag in self:
            fn(flag)


@dataclass
class ParsedFlags:
    """Typed access to the values of a parsed flag set.

    Every accessor raises :class:`FlagError` when the flag is missing, has
    another type or holds an invalid value. The ``must_deprecated_*``
    variants prefer the deprecated flag when it was set explicitly.
    """

    flag_set: FlagSet = field(default_factory=FlagSet)

    def _pick(self, deprecated: str, new_name: str) -> str:
        return deprecated if self.flag_set.changed(deprecated) else new_name

    def must_string(self, name: str) -> str:
        return self.flag_set.get(name, STRING)

    def must_deprecated_string(self, deprecated: str, new_name: str) -> str:
        return self.must_string(self._pick(deprecated, new_name))

    def must_string_slice(self, name: str) -> list[str]:
        return self.flag_set.get(name, STRING_SLICE)

    def must_deprecated_string_slice(self, deprecated: str, new_name: str) -> list[str]:
        return self.must_string_slice(self._pick(deprecated, new_name))

    def must_bool(self, name: str) -> bool:
        return self.flag_set.get(name, BOOL)

    def must_deprecated_bool(self, deprecated: str, new_name: str) -> bool:
        return self.must_bool(self._pick(deprecated, new_name))

    def must_int64(self, name: str) -> int:
        return self.flag_set.get(name, INT64)

    def must_deprecated_int64(self, deprecated: str, new_name: str) -> int:
        return self.must_int64(self._pick(deprecated, new_name))

    def must_int(self, name: str) -> int:
        return self.flag_set.get(name, INT)

    def must_deprecated_int(self, deprecated: str, new_name: str) -> int:
        return self.must_int(self._pick(deprecated, new_name))

    def must_float64(self, name: str) -> float:
        return self.flag_set.get(name, FLOAT64)

    def must_deprecated_float64(self, deprecated: str, new_name: str) -> float:
        return self.must_float64(self._pick(deprecated, new_name))

    def must_duration(self, name: str) -> timedelta:
        return self.flag_set.get(name, DURATION)

    def must_deprecated_duration(self, deprecated: str, new_name: str) -> timedelta:
        return self.must_duration(self._pick(deprecated, new_name))

    def must_human_readable_bytes(self, name: str) -> int:
        """The byte count of a string flag such as ``"1MB"``; empty is 0."""
        value = self.must_string(name)
        if value == "":
            return 0
        try:
            return parse_bytes(value)
        except ValueError as err:
            raise FlagError(f"flag {name}: {err}") from err

    def must_deprecated_human_readable_bytes(self, deprecated: str, new_name: str) -> int:
        return self.must_human_readable_bytes(self._pick(deprecated, new_name))

    def must_regexp(self, name: str) -> Any:
        """The compiled regular expression held by a string flag."""
        value = self.must_string(name)
        try:
            return regex.compile(value)
        except regex.error as err:
            raise FlagError(f"flag {name}: invalid regular expression: {err}") from err

    def must_deprecated_regexp(self, deprecated: str, new_name: str) -> Any:
        return self.must_regexp(self._pick(deprecated, new_name))