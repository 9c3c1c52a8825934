import io
from collections.abc import Iterator

import pdfplumber
from PIL import Image

from safeshrink.pdf.base import BasePdfRenderer
from safeshrink.pdf.exceptions import PdfRenderError

POINTS_PER_INCH = 72


class PdfPlumberRenderer(BasePdfRenderer):
    """Renders PDF pages using pdfplumber's page images."""

    def page_count(self, pdf_bytes: bytes) -> int:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return len(pdf.pages)
        except Exception as exc:
            raise PdfRenderError(f"pdfplumber could not open document: {exc}") from exc

    def render_pages(self, pdf_bytes: bytes, scale: float = 1.0) -> Iterator[Image.Image]:
        try:
            pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
        except Exception as exc:
            raise PdfRenderError(f"pdfplumber could not open document: {exc}") from exc
        with pdf:
            for index, page in enumerate(pdf.pages):
                try:
                    rendered = page.to_image(resolution=POINTS_PER_INCH * scale)
                    image = rendered.original.convert("RGB")
                except Exception as exc:
                    raise PdfRenderError(f"pdfplumber failed on page {index + 1}: {exc}") from exc
                yield image
