"""Module descriptors, module capabilities and the module registry."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from gotenberg.flags import FlagSet

if TYPE_CHECKING:
    from gotenberg.context import Context
    from gotenberg.lifecycle import CancelContext


@dataclass(frozen=True)
class ModuleDescriptor:
    """Describes a module: its unique snake-case id, flags and factory."""

    id: str
    new: Callable[[], Any] | None = None
    flag_set: FlagSet | None = None


@runtime_checkable
class Module(Protocol):
    """A plugin that adds functionality to the application or other modules."""

    def descriptor(self) -> ModuleDescriptor: ...


@runtime_checkable
class Provisioner(Protocol):
    """A module initialised from flags, the environment or other modules."""

    def provision(self, ctx: Context) -> None: ...


@runtime_checkable
class Validator(Protocol):
    """A module checked after provisioning."""

    def validate(self) -> None: ...


@runtime_checkable
class App(Protocol):
    """A module started and stopped by the application."""

    def start(self) -> None: ...

    def startup_message(self) -> str:
        """A custom startup message; an empty string means the default one."""
        ...

    def stop(self, ctx: CancelContext) -> None: ...


@runtime_checkable
class SystemLogger(Protocol):
    """A module with messages to display on startup."""

    def system_messages(self) -> list[str]: ...


@runtime_checkable
class Debuggable(Protocol):
    """A module that contributes additional debug data."""

    def debug(self) -> dict[str, Any]: ...


class ModuleRegistry:
    """Thread-safe collection of module descriptors keyed by id."""

    def __init__(self) -> None:
        self._descriptors: dict[str, ModuleDescriptor] = {}
        self._lock = threading.Lock()

    def register(self, mod: Module) -> None:
        """Register the descriptor of ``mod``; raises ValueError if invalid."""
        desc = mod.descriptor()
        if not desc.id:
            raise ValueError("module with an empty ID cannot be registered")
        if desc.new is None:
            raise ValueError("module factory cannot be None")
        if desc.new() is None:
            raise ValueError("module factory cannot return None")
        with self._lock:
            if desc.id in self._descriptors:
                raise ValueError(f"module {desc.id} is already registered")
            self._descriptors[desc.id] = desc

    def descriptors(self) -> list[ModuleDescriptor]:
        """All registered descriptors, sorted by id."""
        with self._lock:
            return sorted(self._descriptors.values(), key=lambda desc: desc.id)

    def clear(self) -> None:
        """Forget every registered descriptor."""
        with self._lock:
            self._descriptors.clear()


_REGISTRY = ModuleRegistry()


def must_register_module(mod: Module) -> None:
    """Register a module in the application-wide registry."""
    _REGISTRY.register(mod)


def get_module_descriptors() -> list[ModuleDescriptor]:
    """Descriptors of every module in the application-wide registry."""
    return _REGISTRY.descriptors()