import math
from dataclasses import dataclass, field

from safeshrink.admission.filenames import suggested_filename
from safeshrink.admission.models import AdmissionResult
from safeshrink.suitability.catalog import TargetService
from safeshrink.transcode.models import TranscodeResult

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def compression_ratio(original_size: int, output_size: int) -> int:
    """Percentage saved, rounded; negative when the output grew."""
    if original_size <= 0:
        return 0
    return math.floor((1 - output_size / original_size) * 100 + 0.5)


def format_file_size(size_bytes: int) -> str:
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[unit]}"


@dataclass
class ProcessorResult:
    """Everything a caller needs after a successful run."""

    admission: AdmissionResult
    transcode: TranscodeResult
    original_size_bytes: int
    quality_percent: int | None = None
    source_bytes: bytes = field(default=b"", repr=False)
    suitable_services: list[TargetService] = field(default_factory=list)

    @property
    def compression_ratio(self) -> int:
        return compression_ratio(self.original_size_bytes, self.transcode.size_bytes)

    def suggested_filename(self, timestamp_ms: int) -> str:
        return suggested_filename(self.transcode.output_media_type, timestamp_ms)
