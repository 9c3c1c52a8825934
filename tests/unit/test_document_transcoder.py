from unittest.mock import MagicMock

import pymupdf
import pytest
from PIL import Image

from safeshrink.admission.models import MediaType
from safeshrink.pdf.base import BasePdfRenderer
from safeshrink.pdf.exceptions import PdfRenderError
from safeshrink.pdf.pdfplumber_adapter import PdfPlumberRenderer
from safeshrink.pdf.pymupdf_adapter import PyMuPdfRenderer
from safeshrink.transcode.document import DocumentTranscoder
from safeshrink.transcode.exceptions import SourceDecodeError
from safeshrink.transcode.models import TranscodeOutcome, TranscodeRequest


def _page_sizes(pdf_bytes: bytes) -> list[tuple[int, int]]:
    with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [(round(page.rect.width), round(page.rect.height)) for page in doc]


def _failing_renderer(pages: int = 1) -> MagicMock:
    renderer = MagicMock(spec=BasePdfRenderer)
    renderer.page_count.return_value = pages
    renderer.render_pages.side_effect = PdfRenderError("render failed")
    return renderer


class TestRasterizedOutput:
    def test_keeps_page_count_order_and_sizes(self, multi_page_pdf_bytes: bytes) -> None:
        result = DocumentTranscoder().transcode(
            TranscodeRequest(multi_page_pdf_bytes, MediaType.PDF, 60)
        )
        assert result.outcome is TranscodeOutcome.OPTIMIZED
        assert result.output_media_type is MediaType.PDF
        assert result.page_dimensions == ((300, 400), (500, 250), (612, 792))
        assert _page_sizes(result.output_bytes) == [(300, 400), (500, 250), (612, 792)]

    def test_output_has_no_aggregate_dimensions(self, sample_pdf_bytes: bytes) -> None:
        result = DocumentTranscoder().transcode(TranscodeRequest(sample_pdf_bytes, MediaType.PDF, 80))
        assert result.dimensions is None

    def test_pages_are_images(self, sample_pdf_bytes: bytes) -> None:
        result = DocumentTranscoder().transcode(TranscodeRequest(sample_pdf_bytes, MediaType.PDF, 80))
        with pymupdf.open(stream=result.output_bytes, filetype="pdf") as doc:
            assert len(doc[0].get_images()) == 1

    def test_pdfplumber_renderer(self, multi_page_pdf_bytes: bytes) -> None:
        transcoder = DocumentTranscoder(renderer=PdfPlumberRenderer())
        result = transcoder.transcode(TranscodeRequest(multi_page_pdf_bytes, MediaType.PDF, 60))
        assert result.outcome is TranscodeOutcome.OPTIMIZED
        assert len(result.page_dimensions) == 3

    def test_defaults_to_pymupdf(self) -> None:
        assert isinstance(DocumentTranscoder()._renderer, PyMuPdfRenderer)


class TestProgress:
    def test_progress_sequence(self, multi_page_pdf_bytes: bytes) -> None:
        seen: list[float] = []
        DocumentTranscoder().transcode(
            TranscodeRequest(multi_page_pdf_bytes, MediaType.PDF, 60),
            lambda percent, _message: seen.append(percent),
        )
        assert seen[0] == 10
        assert seen[1] == 20
        assert seen[2:5] == pytest.approx([20 + 70 / 3, 20 + 140 / 3, 90])
        assert seen[-2:] == [95, 100]


class TestFallback:
    def test_render_failure_preserves_original(self, sample_pdf_bytes: bytes) -> None:
        transcoder = DocumentTranscoder(renderer=_failing_renderer())
        result = transcoder.transcode(TranscodeRequest(sample_pdf_bytes, MediaType.PDF, 60))
        assert result.outcome is TranscodeOutcome.FALLBACK_PRESERVED
        assert _page_sizes(result.output_bytes) == [(612, 792)]

    def test_missing_pages_fall_back(self, multi_page_pdf_bytes: bytes) -> None:
        renderer = MagicMock(spec=BasePdfRenderer)
        renderer.page_count.return_value = 3
        renderer.render_pages.return_value = iter([Image.new("RGB", (10, 10))])
        transcoder = DocumentTranscoder(renderer=renderer)
        result = transcoder.transcode(TranscodeRequest(multi_page_pdf_bytes, MediaType.PDF, 60))
        assert result.outcome is TranscodeOutcome.FALLBACK_PRESERVED
        assert len(_page_sizes(result.output_bytes)) == 3

    def test_zero_pages_fall_back(self, sample_pdf_bytes: bytes) -> None:
        transcoder = DocumentTranscoder(renderer=_failing_renderer(pages=0))
        result = transcoder.transcode(TranscodeRequest(sample_pdf_bytes, MediaType.PDF, 60))
        assert result.outcome is TranscodeOutcome.FALLBACK_PRESERVED

    def test_fallback_reports_completion(self, sample_pdf_bytes: bytes) -> None:
        seen: list[float] = []
        DocumentTranscoder(renderer=_failing_renderer()).transcode(
            TranscodeRequest(sample_pdf_bytes, MediaType.PDF, 60),
            lambda percent, _message: seen.append(percent),
        )
        assert seen == [10, 20, 100]

    def test_unloadable_source_raises(self) -> None:
        transcoder = DocumentTranscoder(renderer=_failing_renderer())
        with pytest.raises(SourceDecodeError, match="could not be loaded"):
            transcoder.transcode(TranscodeRequest(b"this is not a pdf " * 20, MediaType.PDF, 60))
