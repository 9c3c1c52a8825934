from abc import ABC, abstractmethod
from collections.abc import Iterator

from PIL import Image


class BasePdfRenderer(ABC):
    """Contract for all PDF page rendering adapters."""

    @abstractmethod
    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages in the document.

        Raises:
            PdfRenderError: if the document cannot be opened.
        """

    @abstractmethod
    def render_pages(self, pdf_bytes: bytes, scale: float = 1.0) -> Iterator[Image.Image]:
        """Yield each page, in order, as an RGB Pillow image.

        Args:
            pdf_bytes: Raw PDF file content.
            scale: Render scale; 1.0 means one pixel per PDF point.

        Raises:
            PdfRenderError: if the document or any page fails to render.
        """
