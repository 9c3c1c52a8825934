from safeshrink.admission.models import AdmissionResult


class AdmissionError(Exception):
    """Base exception for a file that was not admitted to transcoding."""

    def __init__(self, result: AdmissionResult) -> None:
        self.result = result
        self.reason = result.reason or "File was not admitted"
        super().__init__(self.reason)


class RejectedInputError(AdmissionError):
    """Raised when the structural validator rejects a file."""


class ThreatDetectedError(AdmissionError):
    """Raised when the threat scanner records at least one threat."""


class AdmissionDeclinedError(AdmissionError):
    """Raised when the caller declines to continue after scan warnings."""


class RuleLoadError(Exception):
    """Raised when a threat rule table cannot be read or parsed."""
