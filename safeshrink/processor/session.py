import threading

from safeshrink.admission.models import MediaType
from safeshrink.logging.logger import Log
from safeshrink.processor.models import ProcessorResult
from safeshrink.transcode.base import ProgressCallback, ignore_progress
from safeshrink.transcode.factory import TranscoderFactory
from safeshrink.transcode.models import TranscodeRequest, TranscodeResult


class TranscodeSession:
    """Re-transcodes one admitted file whenever the quality changes.

    Every call starts again from the original accepted bytes. A newer request
    supersedes older ones: an in-flight call is not cancelled, but once it
    finishes its result is only returned to its own caller and never replaces
    the result of a later request.
    """

    def __init__(
        self,
        source_bytes: bytes,
        media_type: MediaType,
        factory: TranscoderFactory,
    ) -> None:
        self._source_bytes = source_bytes
        self._media_type = media_type
        self._factory = factory
        self._lock = threading.Lock()
        self._generation = 0
        self._current: TranscodeResult | None = None
        self._quality: int | None = None

    @classmethod
    def from_result(
        cls,
        result: ProcessorResult,
        factory: TranscoderFactory,
    ) -> "TranscodeSession":
        media_type = result.admission.media_type
        if media_type is None:
            raise ValueError("Only admitted files can open a transcode session")
        if not result.source_bytes:
            raise ValueError("ProcessorResult carries no admitted bytes")
        session = cls(result.source_bytes, media_type, factory)
        session._current = result.transcode
        session._quality = result.quality_percent
        return session

    @property
    def current(self) -> TranscodeResult | None:
        return self._current

    @property
    def quality(self) -> int | None:
        return self._quality

    def transcode(
        self,
        quality_percent: int,
        on_progress: ProgressCallback = ignore_progress,
    ) -> TranscodeResult:
        request = TranscodeRequest(
            source_bytes=self._source_bytes,
            media_type=self._media_type,
            quality_percent=quality_percent,
        )
        with self._lock:
            self._generation += 1
            generation = self._generation

        result = self._factory.for_media_type(self._media_type).transcode(request, on_progress)

        with self._lock:
            if generation == self._generation:
                self._current = result
                self._quality = quality_percent
            else:
                Log.debug(f"Discarding superseded transcode at quality {quality_percent}")
        return result
