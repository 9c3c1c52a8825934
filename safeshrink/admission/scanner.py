"""Heuristic threat triage over filename, content window and file structure.

This is a fast best-effort scan, not an antivirus engine: a failure inside a
section means "no finding" for that section and never aborts admission.
"""

import math
from collections import Counter

from safeshrink.admission.filenames import (
    MAX_FILENAME_LENGTH,
    has_bidi_controls,
    has_double_extension,
    has_executable_extension,
)
from safeshrink.admission.models import ScanVerdict
from safeshrink.admission.rules import ThreatRules, load_threat_rules
from safeshrink.logging.logger import Log
from safeshrink.processor.file_loader import SourceFile

ZIP_SIGNATURE = b"PK"
ADS_MARKER = b":$DATA"


def shannon_entropy(text: str) -> float:
    """Entropy in bits per character over the character frequencies of ``text``."""
    if not text:
        return 0.0
    length = len(text)
    return -sum(
        (count / length) * math.log2(count / length) for count in Counter(text).values()
    )


class ThreatScanner:
    """Collects threats and warnings for a structurally accepted file."""

    def __init__(
        self,
        rules: ThreatRules | None = None,
        *,
        window_bytes: int = 1024 * 1024,
        max_filename_length: int = MAX_FILENAME_LENGTH,
    ) -> None:
        self._rules = rules if rules is not None else load_threat_rules()
        self._window_bytes = window_bytes
        self._max_filename_length = max_filename_length

    @property
    def rules_version(self) -> str:
        return self._rules.version

    def scan(self, source: SourceFile) -> ScanVerdict:
        threats: list[str] = []
        warnings: list[str] = []
        try:
            self._scan_name(source.name, threats, warnings)
            self._scan_content(source, threats, warnings)
            self._scan_structure(source, warnings)
        except Exception as exc:
            Log.error(f"Scan of '{source.name}' did not complete: {exc}")
            warnings.append("An error occurred during scanning")

        verdict = ScanVerdict(threats=tuple(threats), warnings=tuple(warnings))
        Log.info(
            f"Scanned '{source.name}' (rules {self._rules.version}): "
            f"{len(verdict.threats)} threats, {len(verdict.warnings)} warnings"
        )
        return verdict

    def _scan_name(self, name: str, threats: list[str], warnings: list[str]) -> None:
        if has_executable_extension(name, self._rules.executable_extensions):
            threats.append("Executable file extension detected")
        if has_double_extension(name):
            warnings.append("Double file extension detected")
        if len(name) > self._max_filename_length:
            warnings.append("File name is unusually long")
        if has_bidi_controls(name):
            threats.append("Unicode control characters detected in file name")

    def _scan_content(
        self,
        source: SourceFile,
        threats: list[str],
        warnings: list[str],
    ) -> None:
        try:
            raw = source.read(0, min(source.size_bytes, self._window_bytes))
            content = raw.decode("utf-8", errors="replace")
        except Exception as exc:
            Log.debug(f"Content of '{source.name}' not scannable: {exc}")
            return

        for rule in self._rules.dangerous_patterns:
            if rule.search(content, raw):
                Log.warning(f"Dangerous pattern '{rule.tag}' found in '{source.name}'")
                threats.append("Dangerous code pattern detected")
                break

        lowered = content.lower()
        hits = [s for s in self._rules.suspicious_strings if s in lowered]
        if len(hits) > self._rules.suspicious_threshold:
            Log.debug(f"Suspicious strings in '{source.name}': {hits}")
            warnings.append("Multiple suspicious commands detected")

        entropy = shannon_entropy(content[: self._rules.entropy_sample_chars])
        if entropy > self._rules.entropy_threshold:
            warnings.append(
                "High-entropy content detected (possible encryption or obfuscation)"
            )

    def _scan_structure(self, source: SourceFile, warnings: list[str]) -> None:
        try:
            header = source.read(0, min(source.size_bytes, self._rules.structure_window_bytes))
        except Exception as exc:
            Log.debug(f"Structure of '{source.name}' not readable: {exc}")
            return

        if header.startswith(ZIP_SIGNATURE):
            warnings.append("Archive file detected")
        if ADS_MARKER in header:
            warnings.append("Possible hidden data stream detected")


def scan_summary(verdict: ScanVerdict) -> str:
    """One-line human-readable summary of a scan verdict."""
    if not verdict.safe:
        return f"Dangerous content detected: {', '.join(verdict.threats)}"
    if verdict.warnings:
        return f"Caution: {', '.join(verdict.warnings)}"
    return "File is safe"
