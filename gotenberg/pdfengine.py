"""PDF engine interface, operation parameters and errors."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class PdfEngineMethodNotSupported(NotImplementedError):
    """The engine does not implement the requested operation."""

    def __init__(self, message: str = "method not supported") -> None:
        super().__init__(message)


class PdfSplitModeNotSupported(ValueError):
    """The engine does not support the requested split mode."""

    def __init__(self, message: str = "split mode not supported") -> None:
        super().__init__(message)


class PdfFormatNotSupported(ValueError):
    """The engine does not support the requested PDF format."""

    def __init__(self, message: str = "PDF format not supported") -> None:
        super().__init__(message)


class PdfEngineMetadataValueNotSupported(ValueError):
    """A metadata value cannot be written."""

    def __init__(self, message: str = "metadata value not supported") -> None:
        super().__init__(message)


class SplitModeKind(str, Enum):
    """How a PDF is split."""

    INTERVALS = "intervals"
    PAGES = "pages"


class PdfA(str, Enum):
    """PDF/A conformance levels."""

    A1A = "PDF/A-1a"
    A1B = "PDF/A-1b"
    A2A = "PDF/A-2a"
    A2B = "PDF/A-2b"
    A2U = "PDF/A-2u"
    A3A = "PDF/A-3a"
    A3B = "PDF/A-3b"
    A3U = "PDF/A-3u"


@dataclass(frozen=True)
class SplitMode:
    """Parameters for splitting a PDF.

    ``span`` holds either intervals or page ranges depending on ``mode``;
    ``unify`` only applies to the pages mode.
    """

    mode: SplitModeKind
    span: str
    unify: bool = False

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "mode", SplitModeKind(self.mode))
        except ValueError as err:
            raise PdfSplitModeNotSupported(f"split mode not supported: {self.mode!r}") from err


@dataclass(frozen=True)
class PdfFormats:
    """Target formats of a PDF conversion."""

    pdf_a: PdfA | None = None
    pdf_ua: bool = False

    def __post_init__(self) -> None:
        if self.pdf_a in (None, ""):
            object.__setattr__(self, "pdf_a", None)
            return
        try:
            object.__setattr__(self, "pdf_a", PdfA(self.pdf_a))
        except ValueError as err:
            raise PdfFormatNotSupported(f"PDF format not supported: {self.pdf_a!r}") from err

    def is_empty(self) -> bool:
        """Whether no conversion is requested."""
        return self.pdf_a is None and not self.pdf_ua


@runtime_checkable
class PdfEngine(Protocol):
    """Operations on PDF files."""

    def merge(self, ctx: Any, logger: Any, input_paths: list[str], output_path: str) -> None:
        """Combine the inputs, in order, into a single PDF."""

    def split(
        self, ctx: Any, logger: Any, mode: SplitMode, input_path: str, output_dir_path: str
    ) -> list[str]:
        """Split a PDF and return the paths of the parts."""

    def flatten(self, ctx: Any, logger: Any, input_path: str) -> None:
        """Merge annotation appearances into the page content, irreversibly."""

    def convert(
        self, ctx: Any, logger: Any, formats: PdfFormats, input_path: str, output_path: str
    ) -> None:
        """Convert a PDF to the given formats; does nothing without a format."""

    def read_metadata(self, ctx: Any, logger: Any, input_path: str) -> dict[str, Any]:
        """Return the metadata of a PDF."""

    def write_metadata(
        self, ctx: Any, logger: Any, metadata: dict[str, Any], input_path: str
    ) -> None:
        """Write metadata into a PDF."""


@runtime_checkable
class PdfEngineProvider(Protocol):
    """Supplies a PDF engine to other modules."""

    def pdf_engine(self) -> PdfEngine:
        """Return the engine."""