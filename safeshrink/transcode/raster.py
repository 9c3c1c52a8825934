import io

from PIL import Image, ImageOps

from safeshrink.admission.models import MediaType
from safeshrink.logging.logger import Log
from safeshrink.transcode.base import BaseTranscoder, ProgressCallback, ignore_progress
from safeshrink.transcode.dimensions import MAX_OUTPUT_HEIGHT, MAX_OUTPUT_WIDTH, fit_dimensions
from safeshrink.transcode.encoding import encode_image, encode_jpeg, flatten_to_rgb
from safeshrink.transcode.exceptions import SourceDecodeError
from safeshrink.transcode.models import TranscodeRequest, TranscodeResult


class RasterTranscoder(BaseTranscoder):
    """Re-samples an image into a bounding box and re-encodes it.

    PNG stays PNG and is written losslessly whatever the quality; every other
    format becomes JPEG at the requested quality.
    """

    def __init__(
        self,
        max_width: int = MAX_OUTPUT_WIDTH,
        max_height: int = MAX_OUTPUT_HEIGHT,
    ) -> None:
        self._max_width = max_width
        self._max_height = max_height

    def transcode(
        self,
        request: TranscodeRequest,
        on_progress: ProgressCallback = ignore_progress,
    ) -> TranscodeResult:
        on_progress(10, "Decoding image...")
        image = self._decode(request.source_bytes)
        target = fit_dimensions(*image.size, self._max_width, self._max_height)

        on_progress(50, "Compressing image...")
        if request.media_type is MediaType.PNG:
            output_type = MediaType.PNG
            data = self._encode_png(image, target)
        else:
            output_type = MediaType.JPEG
            data = self._encode_jpeg(image, target, request.quality_percent)

        Log.info(
            f"Transcoded {request.media_type.value} {image.size[0]}x{image.size[1]} -> "
            f"{output_type.value} {target[0]}x{target[1]} "
            f"({len(request.source_bytes)} -> {len(data)} bytes, q={request.quality_percent})"
        )
        on_progress(100, "Compression complete")
        return TranscodeResult(output_bytes=data, output_media_type=output_type, dimensions=target)

    @staticmethod
    def _decode(data: bytes) -> Image.Image:
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                oriented = ImageOps.exif_transpose(image)
                # the source image is closed on exit, so never hand it out
                return image.copy() if oriented is None or oriented is image else oriented
        except Exception as exc:
            raise SourceDecodeError(f"Image could not be decoded: {exc}") from exc

    @staticmethod
    def _encode_png(image: Image.Image, target: tuple[int, int]) -> bytes:
        if target != image.size:
            if image.mode in ("P", "1"):
                image = image.convert("RGBA")
            image = image.resize(target, resample=Image.Resampling.LANCZOS)
        return encode_image(image, "PNG")

    @staticmethod
    def _encode_jpeg(image: Image.Image, target: tuple[int, int], quality: int) -> bytes:
        rgb = flatten_to_rgb(image)
        if target != rgb.size:
            rgb = rgb.resize(target, resample=Image.Resampling.LANCZOS)
        return encode_jpeg(rgb, quality)
