from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from safeshrink.admission.models import AdmissionResult, MediaType, ScanVerdict, ValidationVerdict
from safeshrink.processor.file_loader import SourceFile
from safeshrink.transcode.base import ProgressCallback, ignore_progress
from safeshrink.transcode.models import TranscodeResult


class Phase(str, Enum):
    FILE_CHECK = "file-check"
    VIRUS_SCAN = "virus-scan"
    CONTENT_SCAN = "content-scan"
    TRANSCODING = "transcoding"
    COMPLETE = "complete"


@dataclass(frozen=True)
class PhaseEvent:
    """Progress notification for observers; carries no decision data."""

    phase: Phase
    progress: float
    message: str
    aborted: bool = False


PhaseObserver = Callable[[PhaseEvent], None]
WarningConfirm = Callable[[ScanVerdict], bool]


def decline_warnings(_verdict: ScanVerdict) -> bool:
    return False


def accept_warnings(_verdict: ScanVerdict) -> bool:
    return True


@dataclass(slots=True)
class PipelineContext:
    source: SourceFile
    confirm: WarningConfirm = decline_warnings
    quality_percent: int | None = None
    on_progress: ProgressCallback = ignore_progress
    validation: ValidationVerdict | None = None
    scan: ScanVerdict | None = None
    media_type: MediaType | None = None
    admission: AdmissionResult | None = None
    transcode_result: TranscodeResult | None = None


class PipelineStep(ABC):
    phase: ClassVar[Phase]
    progress: ClassVar[float]
    message: ClassVar[str]

    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
