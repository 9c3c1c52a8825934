"""Structural validation of untrusted input (first admission phase).

Checks run as hard gates in a fixed order and the first failure wins:
size bounds, filename sanity, magic-number signature, then a type-specific
structural probe (image decode or PDF trailer).
"""

import io
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from PIL import Image

from safeshrink.admission.filenames import (
    EXECUTABLE_EXTENSIONS,
    MAX_FILENAME_LENGTH,
    has_executable_extension,
    has_unsafe_characters,
)
from safeshrink.admission.models import MediaType, ValidationVerdict
from safeshrink.admission.signatures import HEADER_LENGTH, match_signature
from safeshrink.logging.logger import Log
from safeshrink.processor.file_loader import SourceFile

PDF_EOF_MARKER = b"%%EOF"
PDF_TRAILER_LENGTH = 20


class StructuralValidator:
    """Decides whether a file is well-formed enough to be scanned."""

    def __init__(
        self,
        *,
        max_size_bytes: int = 50 * 1024 * 1024,
        min_size_bytes: int = 100,
        max_filename_length: int = MAX_FILENAME_LENGTH,
        max_image_dimension: int = 10000,
        image_probe_timeout_seconds: float = 5.0,
        executable_extensions: tuple[str, ...] = EXECUTABLE_EXTENSIONS,
    ) -> None:
        self._max_size_bytes = max_size_bytes
        self._min_size_bytes = min_size_bytes
        self._max_filename_length = max_filename_length
        self._max_image_dimension = max_image_dimension
        self._image_probe_timeout = image_probe_timeout_seconds
        self._executable_extensions = executable_extensions

    def validate(self, source: SourceFile) -> ValidationVerdict:
        verdict = self._run_gates(source)
        if verdict.media_type is not None:
            Log.info(f"Validated '{source.name}' as {verdict.media_type.value}")
        else:
            Log.warning(f"Rejected '{source.name}': {verdict.rejection_reason}")
        return verdict

    def _run_gates(self, source: SourceFile) -> ValidationVerdict:
        reason = self._check_size(source.size_bytes) or self._check_name(source.name)
        if reason:
            return ValidationVerdict.reject(reason)

        signature = match_signature(source.read(0, HEADER_LENGTH))
        if signature is None:
            return ValidationVerdict.reject("Unsupported file format")
        media_type = signature.media_type
        if source.declared_media_type and source.declared_media_type != media_type.value:
            Log.warning(
                f"Media type mismatch for '{source.name}': "
                f"declared={source.declared_media_type}, actual={media_type.value}"
            )

        if media_type.is_image:
            reason = self._probe_image(source)
        else:
            reason = self._probe_pdf(source)
        if reason:
            return ValidationVerdict.reject(reason)
        return ValidationVerdict.accept(media_type)

    def _check_size(self, size_bytes: int) -> str | None:
        if size_bytes > self._max_size_bytes:
            max_mb = round(self._max_size_bytes / (1024 * 1024))
            return f"File is too large (max {max_mb}MB)"
        if size_bytes < self._min_size_bytes:
            return "File is too small"
        return None

    def _check_name(self, name: str) -> str | None:
        if has_unsafe_characters(name):
            return "File name contains invalid characters"
        if len(name) > self._max_filename_length:
            return "File name is too long"
        if has_executable_extension(name, self._executable_extensions):
            return "Executable files are not allowed"
        return None

    def _probe_image(self, source: SourceFile) -> str | None:
        data = source.read_all()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="image-probe")
        try:
            future = executor.submit(_decode_dimensions, data, self._max_image_dimension)
            try:
                width, height = future.result(timeout=self._image_probe_timeout)
            except FutureTimeoutError:
                return "Image decoding timed out"
            except Image.DecompressionBombError:
                return "Image dimensions are too large"
            except Exception as exc:
                Log.debug(f"Image probe failed for '{source.name}': {exc}")
                return "Corrupted image file"
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if width > self._max_image_dimension or height > self._max_image_dimension:
            return "Image dimensions are too large"
        return None

    @staticmethod
    def _probe_pdf(source: SourceFile) -> str | None:
        if PDF_EOF_MARKER not in source.tail(PDF_TRAILER_LENGTH):
            return "Invalid PDF file"
        return None


def _decode_dimensions(data: bytes, max_dimension: int) -> tuple[int, int]:
    """Decode an image fully and return its size.

    Oversized images are reported from the header alone, without decoding
    pixel data. Headers past Pillow's pixel-count guard raise
    ``DecompressionBombError`` from ``Image.open`` itself.
    """
    with Image.open(io.BytesIO(data)) as image:
        width, height = image.size
        if width <= max_dimension and height <= max_dimension:
            image.load()
    return width, height
