from dataclasses import dataclass, field
from enum import Enum

from safeshrink.admission.models import MediaType

MIN_QUALITY = 10
MAX_QUALITY = 100


class TranscodeOutcome(str, Enum):
    """Whether the output was actually recompressed.

    FALLBACK_PRESERVED marks a document that could not be rasterized and was
    only re-serialized from the original.
    """

    OPTIMIZED = "optimized"
    FALLBACK_PRESERVED = "fallback_preserved"


@dataclass(frozen=True)
class TranscodeRequest:
    source_bytes: bytes
    media_type: MediaType
    quality_percent: int

    def __post_init__(self) -> None:
        if not MIN_QUALITY <= self.quality_percent <= MAX_QUALITY:
            raise ValueError(
                f"quality_percent must be within [{MIN_QUALITY}, {MAX_QUALITY}], "
                f"got {self.quality_percent}"
            )


@dataclass(frozen=True)
class TranscodeResult:
    """Output bytes plus metadata.

    ``dimensions`` is set for raster output only; document output reports
    per-page sizes in ``page_dimensions`` instead.
    """

    output_bytes: bytes
    output_media_type: MediaType
    dimensions: tuple[int, int] | None = None
    outcome: TranscodeOutcome = TranscodeOutcome.OPTIMIZED
    page_dimensions: tuple[tuple[int, int], ...] = field(default_factory=tuple)

    @property
    def size_bytes(self) -> int:
        return len(self.output_bytes)


@dataclass
class Page:
    """One rasterized page, held only while the output document is assembled."""

    page_index: int
    raster_bytes: bytes
    width: int
    height: int
