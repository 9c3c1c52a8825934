from abc import ABC, abstractmethod
from collections.abc import Callable

from safeshrink.transcode.models import TranscodeRequest, TranscodeResult

ProgressCallback = Callable[[float, str], None]


def ignore_progress(_percent: float, _message: str) -> None:
    return None


class BaseTranscoder(ABC):
    """Contract for all transcoders."""

    @abstractmethod
    def transcode(
        self,
        request: TranscodeRequest,
        on_progress: ProgressCallback = ignore_progress,
    ) -> TranscodeResult:
        """Re-encode the request's source at its quality factor.

        Args:
            request: Accepted source bytes, media type and quality.
            on_progress: Receives (percent, message) while work advances.

        Returns:
            TranscodeResult with output bytes and metadata.

        Raises:
            TranscodeError: if the source cannot be decoded or encoded.
        """
