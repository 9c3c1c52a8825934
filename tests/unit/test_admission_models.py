import pytest

from safeshrink.admission.exceptions import AdmissionError, ThreatDetectedError
from safeshrink.admission.models import (
    AdmissionDecision,
    AdmissionResult,
    MediaType,
    ScanVerdict,
    ValidationVerdict,
)


class TestMediaType:
    def test_is_image(self) -> None:
        assert MediaType.JPEG.is_image
        assert MediaType.WEBP.is_image
        assert not MediaType.PDF.is_image


class TestScanVerdict:
    def test_safe_iff_no_threats(self) -> None:
        assert ScanVerdict().safe
        assert ScanVerdict(warnings=("w",)).safe
        assert not ScanVerdict(threats=("t",)).safe


class TestAdmissionResult:
    def test_rejected_file_cannot_carry_scan(self) -> None:
        with pytest.raises(ValueError, match="scan verdict"):
            AdmissionResult(
                validation=ValidationVerdict.reject("File is too small"),
                decision=AdmissionDecision.REJECTED,
                scan=ScanVerdict(),
            )

    def test_admitted_exposes_warnings(self) -> None:
        result = AdmissionResult(
            validation=ValidationVerdict.accept(MediaType.PNG),
            decision=AdmissionDecision.ADMITTED,
            scan=ScanVerdict(warnings=("Archive file detected",)),
            media_type=MediaType.PNG,
        )
        assert result.admitted
        assert result.warnings == ("Archive file detected",)

    def test_rejected_has_no_warnings(self) -> None:
        result = AdmissionResult(
            validation=ValidationVerdict.reject("Unsupported file format"),
            decision=AdmissionDecision.REJECTED,
            reason="Unsupported file format",
        )
        assert not result.admitted
        assert result.warnings == ()


class TestAdmissionError:
    def test_carries_result_and_reason(self) -> None:
        result = AdmissionResult(
            validation=ValidationVerdict.accept(MediaType.PDF),
            decision=AdmissionDecision.THREAT,
            scan=ScanVerdict(threats=("Dangerous code pattern detected",)),
            reason="Dangerous content detected: Dangerous code pattern detected",
        )
        exc = ThreatDetectedError(result)
        assert isinstance(exc, AdmissionError)
        assert exc.result is result
        assert str(exc) == result.reason

    def test_falls_back_to_generic_reason(self) -> None:
        result = AdmissionResult(
            validation=ValidationVerdict.reject("x"),
            decision=AdmissionDecision.REJECTED,
        )
        assert AdmissionError(result).reason == "File was not admitted"
