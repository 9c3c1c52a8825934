from safeshrink.config.settings import Settings
from safeshrink.pdf.base import BasePdfRenderer
from safeshrink.pdf.pdfplumber_adapter import PdfPlumberRenderer
from safeshrink.pdf.pymupdf_adapter import PyMuPdfRenderer


class PdfRendererFactory:
    """Creates the PDF page renderer selected in settings."""

    ADAPTERS: dict[str, type[BasePdfRenderer]] = {
        "pdfplumber": PdfPlumberRenderer,
        "pymupdf": PyMuPdfRenderer,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfRenderer:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
