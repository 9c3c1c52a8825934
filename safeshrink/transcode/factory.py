from safeshrink.admission.models import MediaType
from safeshrink.config.settings import Settings
from safeshrink.pdf.factory import PdfRendererFactory
from safeshrink.transcode.base import BaseTranscoder
from safeshrink.transcode.document import DocumentTranscoder
from safeshrink.transcode.raster import RasterTranscoder


class TranscoderFactory:
    """Picks the transcoder for a validated media type."""

    def __init__(self, raster: BaseTranscoder, document: BaseTranscoder) -> None:
        self._raster = raster
        self._document = document

    def for_media_type(self, media_type: MediaType) -> BaseTranscoder:
        if media_type is MediaType.PDF:
            return self._document
        if media_type.is_image:
            return self._raster
        raise ValueError(f"No transcoder for media type '{media_type.value}'")

    @classmethod
    def create(cls, settings: Settings) -> "TranscoderFactory":
        return cls(
            raster=RasterTranscoder(
                max_width=settings.max_output_width,
                max_height=settings.max_output_height,
            ),
            document=DocumentTranscoder(renderer=PdfRendererFactory.create(settings)),
        )
