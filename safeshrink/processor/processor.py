from collections.abc import Callable, Sequence
from pathlib import Path

from safeshrink.admission.exceptions import AdmissionError
from safeshrink.admission.models import AdmissionResult
from safeshrink.admission.rules import load_threat_rules
from safeshrink.admission.scanner import ThreatScanner
from safeshrink.admission.validator import StructuralValidator
from safeshrink.config.settings import Settings
from safeshrink.logging.logger import Log
from safeshrink.processor.file_loader import SourceFile, snapshot
from safeshrink.processor.models import ProcessorResult
from safeshrink.processor.pipeline import (
    Phase,
    PhaseEvent,
    PhaseObserver,
    PipelineContext,
    PipelineStep,
    WarningConfirm,
    accept_warnings,
    decline_warnings,
)
from safeshrink.processor.steps import (
    ContentScanStep,
    FileCheckStep,
    TranscodeStep,
    VirusScanStep,
)
from safeshrink.suitability.catalog import DEFAULT_TARGET_SERVICES, TargetService
from safeshrink.suitability.index import suitable_for_result
from safeshrink.transcode.exceptions import TranscodeError
from safeshrink.transcode.factory import TranscoderFactory
from safeshrink.transcode.models import MAX_QUALITY, MIN_QUALITY

TRANSCODE_PROGRESS_START = 40.0
TRANSCODE_PROGRESS_END = 99.0


class AdmissionPipeline:
    """Phase state machine: file-check -> virus-scan -> content-scan ->
    transcoding -> complete.

    Observers only receive PhaseEvents; the single decision point is the
    ``confirm`` callback consulted when a safe scan still produced warnings.
    Rejections short-circuit the run and surface as one AdmissionError.

    Each run reads the source once; every phase sees that same buffer.
    """

    def __init__(
        self,
        *,
        admission_steps: Sequence[PipelineStep],
        transcode_step: PipelineStep,
        confirm: WarningConfirm = decline_warnings,
        catalog: Sequence[TargetService] = DEFAULT_TARGET_SERVICES,
        max_source_bytes: int | None = None,
    ) -> None:
        self._admission_steps = list(admission_steps)
        self._transcode_step = transcode_step
        self._confirm = confirm
        self._catalog = catalog
        self._max_source_bytes = max_source_bytes
        self._observers: list[PhaseObserver] = []
        self._phase = Phase.FILE_CHECK
        self._progress = 0.0

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def progress(self) -> float:
        return self._progress

    def subscribe(self, observer: PhaseObserver) -> Callable[[], None]:
        """Register an observer; the returned callable unsubscribes it."""
        self._observers.append(observer)
        return lambda: self._observers.remove(observer)

    def reset(self) -> None:
        self._phase = Phase.FILE_CHECK
        self._progress = 0.0

    def admit(self, source: SourceFile, confirm: WarningConfirm | None = None) -> AdmissionResult:
        """Run the admission phases only and return the verdict."""
        context = self._new_context(source, confirm)
        try:
            self._admit(context)
        except AdmissionError as exc:
            self._abort(exc.reason)
            return exc.result
        if context.admission is None:
            raise RuntimeError("Admission steps finished without a verdict")
        return context.admission

    def process(
        self,
        source: SourceFile,
        quality_percent: int,
        confirm: WarningConfirm | None = None,
    ) -> ProcessorResult:
        """Admit the file, transcode it and compute suitability facts.

        Raises:
            RejectedInputError, ThreatDetectedError, AdmissionDeclinedError:
                when the file is not admitted.
            TranscodeError: when the admitted file cannot be transcoded.
        """
        if not MIN_QUALITY <= quality_percent <= MAX_QUALITY:
            raise ValueError(
                f"quality_percent must be within [{MIN_QUALITY}, {MAX_QUALITY}], "
                f"got {quality_percent}"
            )
        context = self._new_context(source, confirm)
        context.quality_percent = quality_percent
        context.on_progress = self._transcode_progress
        try:
            self._admit(context)
            self._run_step(self._transcode_step, context)
        except AdmissionError as exc:
            self._abort(exc.reason)
            raise
        except TranscodeError as exc:
            Log.error(f"Transcoding '{source.name}' failed: {exc}")
            self._abort(str(exc))
            raise

        if context.admission is None or context.transcode_result is None:
            raise RuntimeError("Pipeline finished without a transcode result")
        result = ProcessorResult(
            admission=context.admission,
            transcode=context.transcode_result,
            original_size_bytes=context.source.size_bytes,
            source_bytes=context.source.read_all(),
            quality_percent=quality_percent,
            suitable_services=suitable_for_result(context.transcode_result, self._catalog),
        )
        self._advance(Phase.COMPLETE, 100, "Compression complete!")
        Log.info(
            f"Completed '{source.name}': {result.original_size_bytes} -> "
            f"{result.transcode.size_bytes} bytes ({result.compression_ratio}% saved)"
        )
        return result

    def _new_context(self, source: SourceFile, confirm: WarningConfirm | None) -> PipelineContext:
        self.reset()
        return PipelineContext(
            source=snapshot(source, self._max_source_bytes),
            confirm=confirm or self._confirm,
        )

    def _admit(self, context: PipelineContext) -> None:
        Log.info(f"Admitting '{context.source.name}' ({context.source.size_bytes} bytes)")
        for step in self._admission_steps:
            self._run_step(step, context)

    def _run_step(self, step: PipelineStep, context: PipelineContext) -> None:
        self._advance(step.phase, step.progress, step.message)
        step.run(context)

    def _transcode_progress(self, percent: float, message: str) -> None:
        span = TRANSCODE_PROGRESS_END - TRANSCODE_PROGRESS_START
        scaled = TRANSCODE_PROGRESS_START + span * min(max(percent, 0.0), 100.0) / 100
        self._advance(Phase.TRANSCODING, scaled, message)

    def _advance(self, phase: Phase, progress: float, message: str) -> None:
        self._phase = phase
        self._progress = max(self._progress, progress)
        Log.debug(f"[{phase.value}] {self._progress:.0f}% {message}")
        self._notify(PhaseEvent(phase=phase, progress=self._progress, message=message))

    def _abort(self, reason: str) -> None:
        Log.warning(f"Pipeline aborted during {self._phase.value}: {reason}")
        self._notify(
            PhaseEvent(phase=self._phase, progress=self._progress, message=reason, aborted=True)
        )
        self.reset()

    def _notify(self, event: PhaseEvent) -> None:
        for observer in list(self._observers):
            observer(event)


def build_pipeline(settings: Settings) -> AdmissionPipeline:
    """Build an AdmissionPipeline with all components wired from settings."""
    rules_path = Path(settings.threat_rules_path) if settings.threat_rules_path else None
    validator = StructuralValidator(
        max_size_bytes=settings.max_file_size_bytes,
        min_size_bytes=settings.min_file_size_bytes,
        max_filename_length=settings.max_filename_length,
        max_image_dimension=settings.max_image_dimension,
        image_probe_timeout_seconds=settings.image_probe_timeout_seconds,
    )
    scanner = ThreatScanner(
        load_threat_rules(rules_path),
        window_bytes=settings.scan_window_bytes,
        max_filename_length=settings.max_filename_length,
    )
    return AdmissionPipeline(
        admission_steps=[
            FileCheckStep(validator),
            VirusScanStep(scanner),
            ContentScanStep(),
        ],
        transcode_step=TranscodeStep(TranscoderFactory.create(settings)),
        confirm=accept_warnings if settings.auto_accept_warnings else decline_warnings,
        max_source_bytes=settings.max_file_size_bytes,
    )
