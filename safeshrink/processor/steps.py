from safeshrink.admission.exceptions import (
    AdmissionDeclinedError,
    RejectedInputError,
    ThreatDetectedError,
)
from safeshrink.admission.models import AdmissionDecision, AdmissionResult
from safeshrink.admission.scanner import ThreatScanner, scan_summary
from safeshrink.admission.validator import StructuralValidator
from safeshrink.logging.logger import Log
from safeshrink.processor.pipeline import Phase, PipelineContext, PipelineStep
from safeshrink.transcode.factory import TranscoderFactory
from safeshrink.transcode.models import TranscodeRequest


class FileCheckStep(PipelineStep):
    phase = Phase.FILE_CHECK
    progress = 5
    message = "Checking file format..."

    def __init__(self, validator: StructuralValidator) -> None:
        self._validator = validator

    def run(self, context: PipelineContext) -> PipelineContext:
        verdict = self._validator.validate(context.source)
        context.validation = verdict
        if not verdict.accepted:
            context.admission = AdmissionResult(
                validation=verdict,
                decision=AdmissionDecision.REJECTED,
                reason=verdict.rejection_reason,
            )
            raise RejectedInputError(context.admission)
        context.media_type = verdict.media_type
        return context


class VirusScanStep(PipelineStep):
    phase = Phase.VIRUS_SCAN
    progress = 15
    message = "Running virus scan..."

    def __init__(self, scanner: ThreatScanner) -> None:
        self._scanner = scanner

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.validation is None or not context.validation.accepted:
            raise ValueError("PipelineContext.validation must be accepted before scanning")
        scan = self._scanner.scan(context.source)
        context.scan = scan
        if not scan.safe:
            context.admission = AdmissionResult(
                validation=context.validation,
                decision=AdmissionDecision.THREAT,
                scan=scan,
                media_type=context.media_type,
                reason=scan_summary(scan),
            )
            raise ThreatDetectedError(context.admission)
        return context


class ContentScanStep(PipelineStep):
    """Asks the caller whether to continue when the scan left warnings."""

    phase = Phase.CONTENT_SCAN
    progress = 25
    message = "Inspecting file contents..."

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.validation is None or context.scan is None:
            raise ValueError("PipelineContext.scan must be set before the content review")
        scan = context.scan
        if scan.warnings and not context.confirm(scan):
            context.admission = AdmissionResult(
                validation=context.validation,
                decision=AdmissionDecision.DECLINED,
                scan=scan,
                media_type=context.media_type,
                reason=f"Declined after warnings: {', '.join(scan.warnings)}",
            )
            raise AdmissionDeclinedError(context.admission)
        if scan.warnings:
            Log.info(f"Continuing '{context.source.name}' despite {len(scan.warnings)} warnings")
        context.admission = AdmissionResult(
            validation=context.validation,
            decision=AdmissionDecision.ADMITTED,
            scan=scan,
            media_type=context.media_type,
        )
        return context


class TranscodeStep(PipelineStep):
    phase = Phase.TRANSCODING
    progress = 40
    message = "Compressing..."

    def __init__(self, factory: TranscoderFactory) -> None:
        self._factory = factory

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.admission is None or not context.admission.admitted:
            raise ValueError("PipelineContext.admission must be admitted before transcoding")
        if context.media_type is None or context.quality_percent is None:
            raise ValueError("PipelineContext needs media_type and quality_percent to transcode")
        request = TranscodeRequest(
            source_bytes=context.source.read_all(),
            media_type=context.media_type,
            quality_percent=context.quality_percent,
        )
        transcoder = self._factory.for_media_type(context.media_type)
        context.transcode_result = transcoder.transcode(request, context.on_progress)
        return context
