from collections.abc import Iterator

import pymupdf
from PIL import Image

from safeshrink.pdf.base import BasePdfRenderer
from safeshrink.pdf.exceptions import PdfRenderError


class PyMuPdfRenderer(BasePdfRenderer):
    """Renders PDF pages using PyMuPDF."""

    def page_count(self, pdf_bytes: bytes) -> int:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return int(doc.page_count)
        except Exception as exc:
            raise PdfRenderError(f"pymupdf could not open document: {exc}") from exc

    def render_pages(self, pdf_bytes: bytes, scale: float = 1.0) -> Iterator[Image.Image]:
        try:
            doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise PdfRenderError(f"pymupdf could not open document: {exc}") from exc
        matrix = pymupdf.Matrix(scale, scale)
        with doc:
            for index in range(doc.page_count):
                try:
                    pix = doc.load_page(index).get_pixmap(matrix=matrix, alpha=False)
                    image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
                except Exception as exc:
                    raise PdfRenderError(f"pymupdf failed on page {index + 1}: {exc}") from exc
                yield image
