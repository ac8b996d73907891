"""Metrics exposed by modules."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Metric:
    """A named metric whose current value comes from ``read``."""

    name: str
    read: Callable[[], float]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("metric name is required")
        if not callable(self.read):
            raise ValueError(f"metric {self.name} needs a callable read function")

    def read_value(self) -> float:
        """The current value of the metric."""
        return float(self.read())


@runtime_checkable
class MetricsProvider(Protocol):
    """A module that provides a list of metrics."""

    def metrics(self) -> list[Metric]: ...