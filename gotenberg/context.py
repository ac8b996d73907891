"""Lazy provisioning and lookup of modules by capability."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from gotenberg.flags import ParsedFlags
from gotenberg.modules import ModuleDescriptor, Provisioner, Validator


class ModuleLoadError(RuntimeError):
    """A module could not be provisioned, validated or found."""


class Context:
    """Provisions modules on demand and caches the resulting instances."""

    def __init__(
        self,
        flags: ParsedFlags | None = None,
        descriptors: Iterable[ModuleDescriptor] = (),
    ) -> None:
        self._flags = flags if flags is not None else ParsedFlags()
        self._descriptors = list(descriptors)
        self._instances: dict[str, Any] = {}

    def parsed_flags(self) -> ParsedFlags:
        """The parsed flags of the application."""
        return self._flags

    def module_instances(self) -> dict[str, Any]:
        """The modules loaded so far, keyed by id."""
        return dict(self._instances)

    def module(self, kind: type) -> Any:
        """The one and only module satisfying ``kind``."""
        try:
            mods = self.modules(kind)
        except ModuleLoadError as err:
            raise ModuleLoadError(f"get module: {err}") from err
        if len(mods) != 1:
            name = getattr(kind, "__name__", repr(kind))
            raise ModuleLoadError(f"expected to have one and only one {name} module")
        return mods[0]

    def modules(self, kind: type) -> list[Any]:
        """Every module satisfying ``kind``, provisioning those not yet loaded."""
        found: list[Any] = []
        for desc in self._descriptors:
            candidate = desc.new()
            if not isinstance(candidate, kind):
                continue
            if desc.id in self._instances:
                found.append(self._instances[desc.id])
                continue
            self._load(desc.id, candidate)
            found.append(candidate)
        return found

    def _load(self, mod_id: str, instance: Any) -> None:
        if isinstance(instance, Provisioner):
            try:
                instance.provision(self)
            except Exception as err:
                raise ModuleLoadError(f"provision module {mod_id}: {err}") from err
        if isinstance(instance, Validator):
            try:
                instance.validate()
            except Exception as err:
                raise ModuleLoadError(f"validate module {mod_id}: {err}") from err
        self._instances[mod_id] = instance