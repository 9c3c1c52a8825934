from dataclasses import dataclass
from enum import Enum


class MediaType(str, Enum):
    """Media types admitted by signature match."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    WEBP = "image/webp"
    PDF = "application/pdf"

    @property
    def is_image(self) -> bool:
        return self.value.startswith("image/")


@dataclass(frozen=True)
class FileSignature:
    """Magic-number prefix mapped to the media type it identifies."""

    prefix: bytes
    media_type: MediaType
    extension: str

    def matches(self, header: bytes) -> bool:
        return header.startswith(self.prefix)


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of the structural validator."""

    accepted: bool
    media_type: MediaType | None = None
    rejection_reason: str | None = None

    @classmethod
    def accept(cls, media_type: MediaType) -> "ValidationVerdict":
        return cls(accepted=True, media_type=media_type)

    @classmethod
    def reject(cls, reason: str) -> "ValidationVerdict":
        return cls(accepted=False, rejection_reason=reason)


@dataclass(frozen=True)
class ScanVerdict:
    """Outcome of the threat scanner.

    ``safe`` is derived: any recorded threat makes the verdict unsafe, while
    warnings never do.
    """

    threats: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def safe(self) -> bool:
        return not self.threats


class AdmissionDecision(str, Enum):
    ADMITTED = "admitted"
    REJECTED = "rejected"
    THREAT = "threat"
    DECLINED = "declined"


@dataclass(frozen=True)
class AdmissionResult:
    """Single value returned by the admission phases of the pipeline."""

    validation: ValidationVerdict
    decision: AdmissionDecision
    scan: ScanVerdict | None = None
    media_type: MediaType | None = None
    reason: str | None = None

    def __post_init__(self) -> None:
        if not self.validation.accepted and self.scan is not None:
            raise ValueError("scan verdict must be absent for a rejected file")

    @property
    def admitted(self) -> bool:
        return self.decision is AdmissionDecision.ADMITTED

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.scan.warnings if self.scan is not None else ()
