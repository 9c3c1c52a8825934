"""Re-rasterizing PDF transcoder.

Every page is rendered at native scale, recompressed as JPEG and placed on a
new page of exactly the same pixel size. When any part of that fails the
original document is re-serialized instead, and the result is marked
FALLBACK_PRESERVED so callers can tell the two outcomes apart.
"""

import pymupdf

from safeshrink.admission.models import MediaType
from safeshrink.logging.logger import Log
from safeshrink.pdf.base import BasePdfRenderer
from safeshrink.pdf.exceptions import PdfRenderError
from safeshrink.pdf.pymupdf_adapter import PyMuPdfRenderer
from safeshrink.transcode.base import BaseTranscoder, ProgressCallback, ignore_progress
from safeshrink.transcode.encoding import encode_jpeg
from safeshrink.transcode.exceptions import SourceDecodeError
from safeshrink.transcode.models import (
    Page,
    TranscodeOutcome,
    TranscodeRequest,
    TranscodeResult,
)

RENDER_SCALE = 1.0
PAGES_PROGRESS_START = 20.0
PAGES_PROGRESS_SPAN = 70.0


class DocumentTranscoder(BaseTranscoder):
    def __init__(self, renderer: BasePdfRenderer | None = None) -> None:
        self._renderer = renderer if renderer is not None else PyMuPdfRenderer()

    def transcode(
        self,
        request: TranscodeRequest,
        on_progress: ProgressCallback = ignore_progress,
    ) -> TranscodeResult:
        on_progress(10, "Loading PDF...")
        try:
            data, page_sizes = self._rasterize(request, on_progress)
        except Exception as exc:
            Log.warning(f"PDF rasterization failed, preserving original structure: {exc}")
            return self._preserve(request.source_bytes, on_progress)

        on_progress(100, "Done")
        Log.info(
            f"Rasterized {len(page_sizes)}-page PDF "
            f"({len(request.source_bytes)} -> {len(data)} bytes, q={request.quality_percent})"
        )
        return TranscodeResult(
            output_bytes=data,
            output_media_type=MediaType.PDF,
            outcome=TranscodeOutcome.OPTIMIZED,
            page_dimensions=tuple(page_sizes),
        )

    def _rasterize(
        self,
        request: TranscodeRequest,
        on_progress: ProgressCallback,
    ) -> tuple[bytes, list[tuple[int, int]]]:
        total = self._renderer.page_count(request.source_bytes)
        if total < 1:
            raise PdfRenderError("Document has no pages")
        on_progress(PAGES_PROGRESS_START, f"Compressing {total}-page PDF...")

        page_sizes: list[tuple[int, int]] = []
        with pymupdf.open() as output:  # type: ignore[no-untyped-call]
            pages = self._renderer.render_pages(request.source_bytes, scale=RENDER_SCALE)
            for page_index, image in enumerate(pages, start=1):
                on_progress(
                    PAGES_PROGRESS_START + (page_index / total) * PAGES_PROGRESS_SPAN,
                    f"Processing page {page_index}/{total}...",
                )
                page = Page(
                    page_index=page_index,
                    raster_bytes=encode_jpeg(image, request.quality_percent),
                    width=image.width,
                    height=image.height,
                )
                _append_page(output, page)
                page_sizes.append((page.width, page.height))

            if len(page_sizes) != total:
                raise PdfRenderError(f"Rendered {len(page_sizes)} of {total} pages")
            on_progress(95, "Saving PDF...")
            data = output.tobytes(garbage=3, deflate=True)
        return data, page_sizes

    @staticmethod
    def _preserve(source_bytes: bytes, on_progress: ProgressCallback) -> TranscodeResult:
        try:
            with pymupdf.open(stream=source_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                data = doc.tobytes(garbage=1)
        except Exception as exc:
            raise SourceDecodeError(f"PDF could not be loaded: {exc}") from exc
        on_progress(100, "Done")
        return TranscodeResult(
            output_bytes=data,
            output_media_type=MediaType.PDF,
            outcome=TranscodeOutcome.FALLBACK_PRESERVED,
        )


def _append_page(output: pymupdf.Document, page: Page) -> None:
    """Add a page sized to the raster and fill it with the image."""
    pdf_page = output.new_page(width=page.width, height=page.height)
    pdf_page.insert_image(pdf_page.rect, stream=page.raster_bytes)
