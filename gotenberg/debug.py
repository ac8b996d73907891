"""Debug data gathered from the loaded modules and flags."""

from __future__ import annotations

import copy
import platform
import threading
from dataclasses import dataclass, field
from typing import Any

from gotenberg import lifecycle
from gotenberg.context import Context
from gotenberg.modules import Debuggable
from gotenberg.sorting import alphanumeric_sort

_ARCHITECTURES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


@dataclass
class DebugInfo:
    """Version, architecture, modules and flag values of the application."""

    version: str = ""
    architecture: str = ""
    modules: list[str] = field(default_factory=list)
    modules_additional_data: dict[str, dict[str, Any]] = field(default_factory=dict)
    flags: dict[str, Any] = field(default_factory=dict)


_current: DebugInfo | None = None
_lock = threading.Lock()


def _architecture() -> str:
    machine = platform.machine().lower()
    return _ARCHITECTURES.get(machine, machine)


def build_debug(ctx: Context) -> None:
    """Record debug data from the modules loaded in ``ctx``."""
    global _current
    instances = ctx.module_instances()
    info = DebugInfo(
        version=lifecycle.VERSION,
        architecture=_architecture(),
        modules=alphanumeric_sort(instances),
        modules_additional_data={
            mod_id: mod.debug()
            for mod_id, mod in instances.items()
            if isinstance(mod, Debuggable)
        },
        flags={flag.name: flag.value_string() for flag in ctx.parsed_flags().flag_set},
    )
    with _lock:
        _current = info


def debug() -> DebugInfo:
    """A copy of the recorded debug data, or an empty one if none."""
    with _lock:
        return DebugInfo() if _current is None else copy.deepcopy(_current)


def reset_debug() -> None:
    """Forget the recorded debug data."""
    global _current
    with _lock:
        _current = None