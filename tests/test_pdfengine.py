import pytest

from gotenberg.pdfengine import (
    PdfA,
    PdfEngine,
    PdfEngineMethodNotSupported,
    PdfEngineProvider,
    PdfFormats,
    PdfFormatNotSupported,
    PdfSplitModeNotSupported,
    SplitMode,
    SplitModeKind,
)


class _Engine:
    def merge(self, ctx, logger, input_paths, output_path):
        raise PdfEngineMethodNotSupported()

    def split(self, ctx, logger, mode, input_path, output_dir_path):
        return [f"{output_dir_path}/{mode.mode.value}"]

    def flatten(self, ctx, logger, input_path):
        raise PdfEngineMethodNotSupported()

    def convert(self, ctx, logger, formats, input_path, output_path):
        raise PdfEngineMethodNotSupported()

    def read_metadata(self, ctx, logger, input_path):
        return {"Title": input_path}

    def write_metadata(self, ctx, logger, metadata, input_path):
        raise PdfEngineMethodNotSupported()


class _Provider:
    def pdf_engine(self):
        return _Engine()


def test_split_mode_from_string():
    mode = SplitMode("intervals", "1")
    assert mode.mode is SplitModeKind.INTERVALS
    assert mode.unify is False


def test_split_mode_unknown():
    with pytest.raises(PdfSplitModeNotSupported):
        SplitMode("chunks", "1")


def test_pdf_formats_from_string():
    formats = PdfFormats("PDF/A-1b")
    assert formats.pdf_a is PdfA.A1B
    assert formats.is_empty() is False


def test_pdf_formats_empty():
    assert PdfFormats().is_empty() is True
    assert PdfFormats("").is_empty() is True
    assert PdfFormats(pdf_ua=True).is_empty() is False


def test_pdf_formats_unknown():
    with pytest.raises(PdfFormatNotSupported):
        PdfFormats("PDF/A-9z")


def test_engine_protocol_structural():
    engine = _Engine()
    assert isinstance(engine, PdfEngine) is True
    assert isinstance(object(), PdfEngine) is False
    mode = SplitMode("intervals", "2")
    assert engine.split(None, None, mode, "in.pdf", "out") == ["out/intervals"]


def test_provider_returns_engine():
    provider = _Provider()
    assert isinstance(provider, PdfEngineProvider) is True
    engine = provider.pdf_engine()
    mode = SplitMode(SplitModeKind.PAGES, "1-2", unify=True)
    assert engine.split(None, None, mode, "in.pdf", "out") == ["out/pages"]


def test_method_not_supported_message():
    err = PdfEngineMethodNotSupported()
    assert "method not supported" in str(err)
    assert isinstance(err, NotImplementedError)